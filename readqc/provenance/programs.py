"""Identify the external programs used for a run and their versions.

Catalogs the tools a run depends on, failing early when one is not available
and recording versions alongside the outputs for reproducibility.
"""
import csv
import os
import subprocess

from readqc.log import logger
from readqc.pipeline import config_utils, version
from readqc.provenance import do

_cl_progs = [{"cmd": "fastqc", "args": ["--version"], "stdout_flag": "FastQC"},
             {"cmd": "fastp", "args": ["--version"], "stdout_flag": "fastp"},
             {"cmd": "multiqc", "args": ["--version"], "stdout_flag": "version"}]

def check_tools(config, tools=None):
    """Ensure all required programs can be invoked, before any output is written.

    Returns a dictionary of program names to resolved executables.
    """
    if tools is None:
        tools = config_utils.REQUIRED_TOOLS
    found = {}
    for tool in tools:
        exe = do.find_cmd(config_utils.get_program(tool, config))
        if exe is None:
            raise do.ToolUnavailable(config_utils.get_program(tool, config))
        found[tool] = exe
    return found

def _parse_from_stdoutflag(stdout, x):
    for line in stdout:
        if line.find(x) >= 0:
            parts = [p for p in line[line.find(x) + len(x):].split() if p.strip()]
            if parts:
                return parts[0].strip().lstrip("v").rstrip(",")
    return ""

def _get_cl_version(p, exe, timeout=60):
    """Retrieve version of a single commandline program.
    """
    try:
        out = subprocess.run([exe] + p.get("args", []), stdout=subprocess.PIPE,
                             stderr=subprocess.STDOUT, timeout=timeout, check=False)
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug("Could not retrieve version for %s: %s" % (p["cmd"], e))
        return ""
    lines = out.stdout.decode("utf-8", errors="replace").split("\n")
    v = _parse_from_stdoutflag(lines, p["stdout_flag"])
    if not v:
        lines = [l.strip() for l in lines if l.strip()]
        v = lines[-1] if lines else ""
    if v.endswith("."):
        v = v[:-1]
    return v

def get_versions(tools):
    """Retrieve versions for resolved programs, including this package.
    """
    out = [{"program": "readqc",
            "version": ("%s-%s" % (version.__version__, version.__git_revision__)
                        if version.__git_revision__ else version.__version__)}]
    for p in _cl_progs:
        if p["cmd"] in tools:
            out.append({"program": p["cmd"], "version": _get_cl_version(p, tools[p["cmd"]])})
    out.sort(key=lambda x: x["program"])
    return out

def write_versions(dirs, tools):
    """Write CSV file with versions used in analysis pipeline.
    """
    out_file = os.path.join(dirs["logs"], "programs.txt")
    with open(out_file, "w") as out_handle:
        writer = csv.writer(out_handle)
        for p in get_versions(tools):
            writer.writerow([p["program"], p["version"]])
    return out_file
