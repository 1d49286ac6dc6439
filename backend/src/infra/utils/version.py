from importlib.metadata import PackageNotFoundError, version

DISTRIBUTION_NAME = "site-admin-backend"
DEFAULT_VERSION = "1.0.0"


def get_version(distribution: str = DISTRIBUTION_NAME) -> str:
    try:
        return version(distribution)
    except PackageNotFoundError:
        return DEFAULT_VERSION
