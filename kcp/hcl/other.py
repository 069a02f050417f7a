"""
Builders for the utility providers: tls, local, random and null.
"""

from typing import Any

from kcp.hcl.writer import Block, ref

TLS_PROVIDER = ("tls", {"source": "hashicorp/tls", "version": "4.0.6"})
LOCAL_PROVIDER = ("local", {"source": "hashicorp/local", "version": "2.4.0"})
RANDOM_PROVIDER = ("random", {"source": "hashicorp/random", "version": "3.7.2"})
NULL_PROVIDER = ("null", {"source": "hashicorp/null", "version": "3.2.4"})


def local_file(name: str, content_reference: str, filename: str, file_permission: str) -> Block:
    block = Block("resource", "local_file", name)
    block.set("content", ref(content_reference))
    block.set("filename", filename)
    block.set("file_permission", file_permission)
    return block


def random_string(
    name: str, length: int, special: bool = False, numeric: bool = False, upper: bool = False
) -> Block:
    block = Block("resource", "random_string", name)
    block.set("length", length)
    block.set("special", special)
    block.set("numeric", numeric)
    block.set("upper", upper)
    return block


def tls_private_key(name: str, algorithm: str = "RSA", rsa_bits: int = 4096) -> Block:
    block = Block("resource", "tls_private_key", name)
    block.set("algorithm", algorithm)
    block.set("rsa_bits", rsa_bits)
    return block


def ssh_key_files(key_resource: str, private_path: str, public_path: str) -> list[Block]:
    """``local_file`` resources that write both halves of a generated key pair."""
    return [
        local_file(
            "private_key", f"tls_private_key.{key_resource}.private_key_pem", private_path, "400"
        ),
        local_file(
            "public_key", f"tls_private_key.{key_resource}.public_key_openssh", public_path, "400"
        ),
    ]


def terraform_block(*providers: tuple[str, dict[str, Any]]) -> Block:
    """``terraform { required_providers { ... } }`` for the given provider entries."""
    block = Block("terraform")
    required = block.block("required_providers")
    for name, settings in providers:
        required.set(name, dict(settings))
    return block
