"""
Structured logging for Backend TrustScan: get_logger() in every module,
bind_url() around one analysis.
"""

from backend_trustscan.trustscan_logging.logger import bind_url, configure_logging, get_logger

__all__ = ["bind_url", "configure_logging", "get_logger"]
