"""Utility functionality for logging.
"""
import os
import sys

import logbook

from readqc import utils

LOG_NAME = "readqc"
DEFAULT_LOG_DIR = "logs"

logger = logbook.Logger(LOG_NAME)
logger_cl = logbook.Logger(LOG_NAME + "-commands")
logger_stdout = logbook.Logger(LOG_NAME + "-stdout")

def _is_cl(record, _):
    return record.channel == LOG_NAME + "-commands"

def _is_stdout(record, _):
    return record.channel == LOG_NAME + "-stdout"

def _not_cl(record, handler):
    return not _is_cl(record, handler) and not _is_stdout(record, handler)

class CloseableNestedSetup(logbook.NestedSetup):
    def close(self):
        for obj in self.objects:
            if hasattr(obj, "close"):
                obj.close()

def _format_str(config):
    return "".join(["[{record.time:%Y-%m-%dT%H:%MZ}] " if config.get("include_time", True) else "",
                    "{record.level_name}: " if config.get("include_level", False) else "",
                    "{record.message}"])

def _create_log_handler(config):
    """Console handlers: operator summary on stdout, everything else on stderr.
    """
    logbook.set_datetime_format("utc")
    format_str = _format_str(config)
    level = "DEBUG" if config.get("verbose") else "INFO"
    handlers = [logbook.NullHandler()]
    handlers.append(logbook.StreamHandler(sys.stdout, format_string="{record.message}",
                                          level="DEBUG", filter=_is_stdout))
    handlers.append(logbook.StreamHandler(sys.stderr, format_string=format_str, level=level,
                                          filter=_not_cl))
    return CloseableNestedSetup(handlers)

def _create_file_handler(config, log_dir):
    """File handlers written into the run's log directory.

    Bubble so records still reach the console handlers underneath.
    """
    format_str = _format_str(config)
    utils.safe_makedir(log_dir)
    handlers = [logbook.FileHandler(os.path.join(log_dir, "%s.log" % LOG_NAME),
                                    format_string=format_str, level="INFO",
                                    filter=_not_cl, bubble=True),
                logbook.FileHandler(os.path.join(log_dir, "%s-debug.log" % LOG_NAME),
                                    format_string=format_str, level="DEBUG",
                                    filter=_not_cl, bubble=True),
                logbook.FileHandler(os.path.join(log_dir, "%s-commands.log" % LOG_NAME),
                                    format_string=format_str, level="DEBUG",
                                    filter=_is_cl, bubble=True)]
    return CloseableNestedSetup(handlers)

def setup_local_logging(config=None):
    """Setup console logging for a run.

    Handlers are pushed application wide so worker threads used to fan out
    stages log through them too. Callers pop and close the returned handler.
    """
    if config is None: config = {}
    handler = _create_log_handler(config)
    handler.push_application()
    return handler

def setup_file_logging(log_dir, config=None):
    """Add run log files once the output log directory exists.
    """
    if config is None: config = {}
    handler = _create_file_handler(config, log_dir)
    handler.push_application()
    return handler

def close_handler(handler):
    if handler is not None:
        handler.pop_application()
        handler.close()
