from importlib.metadata import PackageNotFoundError, version

__version__ = "0.1.0"


def get_version() -> str:
    try:
        return version("tracelog")
    except PackageNotFoundError:
        return __version__
