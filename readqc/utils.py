"""Helpful utilities for building analysis pipelines.
"""
import os
import shutil
import time

def safe_makedir(dname):
    """Make a directory if it doesn't exist, handling concurrent race conditions.
    """
    if not dname:
        return dname
    num_tries = 0
    max_tries = 5
    while not os.path.exists(dname):
        # we could get an error here if multiple threads are creating
        # the directory at the same time.
        try:
            os.makedirs(dname)
        except OSError:
            if num_tries > max_tries:
                raise
            num_tries += 1
            time.sleep(2)
    return dname

def file_exists(fname):
    """Check if a file exists and is non-empty.
    """
    try:
        return bool(fname) and os.path.exists(fname) and os.path.getsize(fname) > 0
    except OSError:
        return False

def file_readable(fname):
    return bool(fname) and os.path.isfile(fname) and os.access(fname, os.R_OK)

def splitext_plus(f):
    """Split on file extensions, allowing for zipped extensions.
    """
    base, ext = os.path.splitext(f)
    if ext in [".gz", ".bz2", ".zip"]:
        base, ext2 = os.path.splitext(base)
        ext = ext2 + ext
    return base, ext

def is_writable_dir(dname):
    """Check if a directory is writable, or could be created by walking up to
    the closest existing parent.
    """
    dname = os.path.abspath(dname)
    while not os.path.exists(dname):
        parent = os.path.dirname(dname)
        if parent == dname:
            return False
        dname = parent
    return os.path.isdir(dname) and os.access(dname, os.W_OK | os.X_OK)

def which(program, env=None):
    """ returns the path to an executable or None if it can't be found"""
    if env is None:
        env = os.environ

    def is_exe(fpath):
        return os.path.isfile(fpath) and os.access(fpath, os.X_OK)

    fpath, fname = os.path.split(program)
    if fpath:
        if is_exe(program):
            return program
    else:
        for path in env.get("PATH", "").split(os.pathsep):
            exe_file = os.path.join(path, program)
            if path and is_exe(exe_file):
                return exe_file
    return None

def remove_safe(f):
    try:
        if os.path.isdir(f):
            shutil.rmtree(f)
        else:
            os.remove(f)
    except OSError:
        pass
