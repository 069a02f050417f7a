"""
Utility functions and helpers.

Modules:
- files: File reading and writing helpers
- kafka: Kafka version and topic helpers
- naming: ARN, URL and Terraform resource name helpers
- progress: rich progress bars and summary panels
- templates: Jinja2 template rendering and packaged assets
"""
