from .version import __version__ as __version__

__title__ = "PipeBoard"
__description__ = "Live status, history and audit projection for a remote data pipeline."
__author__ = "PipeBoard Developers"
__license__ = "Apache-2.0"
