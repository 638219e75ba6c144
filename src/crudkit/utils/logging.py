from importlib import metadata as importlib_metadata

DISTRIBUTION_NAME = "crudkit"


def get_project_version(name: str = DISTRIBUTION_NAME, default: str = "unknown") -> str:
    """
    Installed version of the distribution `name`, or `default` when it is not installed
    (e.g. running from a source checkout without `pip install -e .`).
    """
    try:
        return importlib_metadata.version(name)
    except importlib_metadata.PackageNotFoundError:
        return default


__all__ = ["get_project_version"]
