"""
Structured logging for store operations - one line per add, search, save and load.
"""

import logging
import os
from typing import Any, Dict, List


class StructuredLogger:
    """Structured logger for vector store, persistence and indexing operations."""

    def __init__(self, name: str = "vecstore"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())

        # Create handler if not already set
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def log_operation(self, operation: str, status: str, details: Dict[str, Any] = None):
        """Log a structured operation."""
        message = f"Operation: {operation}, Status: {status}"
        if details:
            message += f", Details: {details}"

        if status == "failed":
            self.logger.warning(message)
        else:
            self.logger.info(message)

    def log_vector_operation(self, operation: str, record_id: str, details: Dict[str, Any] = None, status: str = "success"):
        """Log a vector operation on a single record."""
        log_details = {"record_id": record_id}
        if details:
            log_details.update(details)

        self.log_operation(f"vector.{operation}", status, log_details)

    def log_batch_operation(self, operation: str, record_ids: List[str], details: Dict[str, Any] = None, status: str = "success"):
        """Log a batch operation, listing at most the first five ids."""
        sample = record_ids[:5]
        log_details = {"count": len(record_ids), "record_ids": sample}
        if len(record_ids) > len(sample):
            log_details["truncated"] = True
        if details:
            log_details.update(details)

        self.log_operation(f"vector.{operation}", status, log_details)

    def log_persistence_operation(self, operation: str, path: str, item_count: int = None,
                                  status: str = "success", details: Dict[str, Any] = None):
        """Log a save or load against a store file."""
        log_details = {"path": str(path)}
        if item_count is not None:
            log_details["item_count"] = item_count
        if details:
            log_details.update(details)

        self.log_operation(f"persistence.{operation}", status, log_details)

    def log_search(self, top_k: int, result_count: int, scanned: int, item_type: str = None):
        """Log a similarity search. Query vectors are never logged."""
        log_details = {"top_k": top_k, "results": result_count, "scanned": scanned}
        if item_type:
            log_details["item_type"] = item_type
        self.logger.debug(f"Operation: vector.search, Status: success, Details: {log_details}")

    # Standard logging methods for compatibility
    def info(self, message: str) -> None:
        """Log an info message."""
        self.logger.info(message)

    def warning(self, message: str) -> None:
        """Log a warning message."""
        self.logger.warning(message)

    def error(self, message: str) -> None:
        """Log an error message."""
        self.logger.error(message)

    def debug(self, message: str) -> None:
        """Log a debug message."""
        self.logger.debug(message)


# Global logger instance
logger = StructuredLogger()
