"""Centralize running of external commands, providing logging and tracking.
"""
import collections
import os
import subprocess
import time

from readqc import utils
from readqc.log import logger, logger_cl

StageResult = collections.namedtuple("StageResult",
                                     ["sample_id", "stage", "exit_code", "log_file", "duration_ms"])

class ToolUnavailable(OSError):
    """External program could not be located or executed.
    """
    def __init__(self, cmd, reason=None):
        self.cmd = cmd
        msg = "Required tool '%s' not found in PATH." % cmd
        if reason:
            msg = "Required tool '%s' could not be run: %s" % (cmd, reason)
        super(ToolUnavailable, self).__init__(msg)

class LogWriteFailure(OSError):
    """Log file for an external program could not be opened for writing.
    """
    def __init__(self, log_file, reason=None):
        self.log_file = log_file
        msg = "Cannot write log file %s" % log_file
        if reason:
            msg += ": %s" % reason
        super(LogWriteFailure, self).__init__(msg)

def find_cmd(cmd, env=None):
    """Resolve a program name or explicit path to an executable.
    """
    return utils.which(os.path.expandvars(os.path.expanduser(cmd)), env)

def run(cmd, args, log_file, sample_id=None, stage=None, env=None, timeout=None):
    """Run the provided command, writing combined output to a log file.

    Non-zero exits are reported in the returned StageResult and never raised;
    deciding if a failure matters is left to the caller.
    """
    run_env = _get_env(env)
    exe = find_cmd(cmd, run_env)
    if exe is None:
        raise ToolUnavailable(cmd)
    cl = [exe] + [str(x) for x in args]
    out_handle = _open_log(log_file)
    logger_cl.debug(" ".join(cl))
    start = time.monotonic()
    with out_handle:
        try:
            proc = subprocess.Popen(cl, stdout=out_handle, stderr=subprocess.STDOUT,
                                    close_fds=True, env=run_env)
        except OSError as e:
            raise ToolUnavailable(cmd, e.strerror or str(e)) from e
        try:
            exitcode = proc.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            proc.kill()
            exitcode = proc.wait()
            logger.warning("%s%s timed out after %ss and was stopped." %
                           (stage or os.path.basename(exe), " : %s" % sample_id if sample_id else "",
                            timeout))
    duration_ms = int(round((time.monotonic() - start) * 1000))
    return StageResult(sample_id, stage, exitcode, log_file, duration_ms)

def _open_log(log_file):
    try:
        utils.safe_makedir(os.path.dirname(os.path.abspath(log_file)))
        return open(log_file, "w")
    except OSError as e:
        raise LogWriteFailure(log_file, e.strerror or str(e)) from e

def _get_env(env):
    if not env:
        return None
    run_env = os.environ.copy()
    run_env.update({k: str(v) for k, v in env.items()})
    return run_env

# checks for validating run completed successfully

def file_nonempty(target_file):
    def check():
        ok = utils.file_exists(target_file)
        if not ok:
            logger.info("Did not find non-empty output file {0}".format(target_file))
        return ok
    return check
