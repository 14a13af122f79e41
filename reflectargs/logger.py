"""Package-wide diagnostic logger (handlers are left to the host application)."""
import logging

logger = logging.getLogger("reflectargs")
