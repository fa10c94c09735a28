"""SDK version, reported to the server in x-renegade-sdk-version."""

__version__ = "0.1.0"


def get_sdk_version() -> str:
    return f"python-v{__version__}"
