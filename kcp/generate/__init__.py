"""
Asset generators behind the ``create-asset`` commands.

Each module turns CLI options into a request, runs the matching HCL or
template generator and writes the result into an output directory.
"""
