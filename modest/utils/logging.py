# -*- coding: utf-8 -*-
"""MoDeST logging module.

DEBUG and INFO messages are printed to sys.stdout, warnings and errors to sys.stderr. Optionally, all messages are
also written to a logfile next to the destriped swath file.
"""

import logging
import os
import warnings
import sys

datefmt = '%Y/%m/%d %H:%M:%S'


class Modest_Logger(logging.Logger):
    def __init__(self, name_logfile, fmt_suffix=None, path_logfile=None, log_level='INFO', append=True):
        # type: (str, any, str, any, bool) -> None
        """Return a logging.Logger instance for a MoDeST run.

        :param name_logfile:    name of the logger
        :param fmt_suffix:      if given, it is included into the log formatter (e.g., the swath file name)
        :param path_logfile:    path of the logfile; if not given, only console handlers are created
        :param log_level:       the logging level to be used ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL';
                                default: 'INFO')
        :param append:          whether to append to an existing logfile (True) or to overwrite it (False)
        """
        super(Modest_Logger, self).__init__(name_logfile)

        self.path_logfile = path_logfile
        suffix = ' [%s]' % fmt_suffix if fmt_suffix else ''
        self.formatter_fileH = logging.Formatter('%(asctime)s' + suffix + ' %(levelname)s:   %(message)s', datefmt)
        self.formatter_ConsoleH = logging.Formatter('%(asctime)s' + suffix + ':   %(message)s', datefmt)

        self.setLevel(log_level)

        if self.handlers:
            return

        if path_logfile:
            if os.path.dirname(path_logfile):
                os.makedirs(os.path.dirname(path_logfile), exist_ok=True)

            fileHandler = logging.FileHandler(path_logfile, mode='a' if append else 'w')
            fileHandler.setFormatter(self.formatter_fileH)
            fileHandler.setLevel(log_level)
            self.addHandler(fileHandler)

        # DEBUG and INFO -> sys.stdout (a StreamHandler would write to sys.stderr by default)
        consoleHandler_out = logging.StreamHandler(stream=sys.stdout)
        consoleHandler_out.set_name('console handler stdout')
        consoleHandler_out.setFormatter(self.formatter_ConsoleH)
        consoleHandler_out.setLevel(log_level)
        consoleHandler_out.addFilter(LessThanFilter(logging.WARNING))
        self.addHandler(consoleHandler_out)

        # WARNING, ERROR, CRITICAL -> sys.stderr
        consoleHandler_err = logging.StreamHandler(stream=sys.stderr)
        consoleHandler_err.set_name('console handler stderr')
        consoleHandler_err.setFormatter(self.formatter_ConsoleH)
        consoleHandler_err.setLevel(logging.WARNING)
        self.addHandler(consoleHandler_err)


def close_logger(logger):
    """Close and remove all handlers of the given logger (releases the logfile)."""
    if logger and hasattr(logger, 'handlers'):
        for handler in logger.handlers[:]:  # if not called with '[:]' the StreamHandlers are left open
            try:
                handler.close()
                logger.removeHandler(handler)
            except PermissionError:
                warnings.warn('Could not properly close logfile due to a PermissionError: %s' % sys.exc_info()[1])

        if logger.handlers[:]:
            warnings.warn('Not all logging handlers could be closed. Remaining handlers: %s' % logger.handlers[:])


class LessThanFilter(logging.Filter):
    """Filter passing only log records below the given level."""

    def __init__(self, exclusive_maximum, name=""):
        super(LessThanFilter, self).__init__(name)
        self.max_level = exclusive_maximum

    def filter(self, record):
        return record.levelno < self.max_level
