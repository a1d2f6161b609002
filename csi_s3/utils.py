# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
Utility functions for the CSI S3 mounter.

This module provides logging configuration and helpers shared by the
mounter backends: operation timing, argument tracing and redaction of
credentials before anything reaches the log.
"""

import logging
import os
import time

# Enable a debug trace of every assembled command line if requested
TRACE_OPERATIONS = os.environ.get('CSI_S3_TRACE_OPS', '').lower() in ('true', '1', 'yes')

# Configure logging
logging.basicConfig(
    level=os.environ.get('CSI_S3_LOG_LEVEL', 'INFO').upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - [%(funcName)s] - %(message)s'
)
logger = logging.getLogger('CSIS3')

# Option keys whose values are secrets
SENSITIVE_OPTIONS = ('passwd', 'secret', 'access_key', 'token', 'password')

REDACTED = '***'

def time_function(func_name, start_time):
    """
    Helper function for timing operations.

    Calculates and logs the elapsed time for a function call.

    Args:
        func_name (str): Name of the function being timed
        start_time (float): Start time from time.time()

    Returns:
        float: Elapsed time in seconds
    """
    elapsed = time.time() - start_time
    logger.info(f"{func_name} completed in {elapsed:.4f} seconds")
    return elapsed

def redact(value):
    """
    Mask the value of a sensitive ``key=value`` option.

    Args:
        value (str): A single command line argument

    Returns:
        str: The argument with a secret value replaced by ``***``
    """
    key, sep, _ = value.partition("=")
    if sep and any(s in key.lower() for s in SENSITIVE_OPTIONS):
        return f"{key}={REDACTED}"
    return value

def redact_credentials(content):
    """Mask the secret half of an ``accessKeyID:secretAccessKey`` blob."""
    access_key, sep, _ = content.partition(":")
    if not sep:
        return REDACTED
    return f"{access_key}:{REDACTED}"

def redact_args(args):
    """Return a copy of ``args`` with every element passed through redact()."""
    return [redact(arg) for arg in args]

def trace_args(operation, command, args):
    """
    Trace an assembled command line for debugging purposes.

    Only logs when the CSI_S3_TRACE_OPS environment variable is set.

    Args:
        operation (str): The lifecycle operation being performed
        command (str): Executable about to be run
        args (list): Its argument list
    """
    if TRACE_OPERATIONS:
        logger.debug(f"TRACE: {operation} {command} {' '.join(redact_args(args))}")
