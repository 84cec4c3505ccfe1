"""Pytest fixtures: paired read inputs and stand-in external QC programs."""

import gzip
import os
import stat

import pytest

from readqc.pipeline import config_utils

FASTQC_STUB = """#!/bin/sh
echo "fastqc $*" >> "$STUB_LOG"
out="."
while [ $# -gt 0 ]; do
  case "$1" in
    --version) echo "FastQC v0.12.1"; exit 0 ;;
    -o) out="$2"; shift 2 ;;
    -t) shift 2 ;;
    -*) shift ;;
    *)
      case "$(basename "$1")" in *badqc*|*badpost*_trimmed*) echo "Failed to process $1"; exit 2 ;; esac
      name=$(basename "$1"); name=${name%.gz}; name=${name%.fastq}; name=${name%.fq}
      echo "<html>$name</html>" > "$out/${name}_fastqc.html"
      echo "Analysis complete for $1"
      shift ;;
  esac
done
"""

FASTP_STUB = """#!/bin/sh
echo "fastp $*" >> "$STUB_LOG"
while [ $# -gt 0 ]; do
  case "$1" in
    --version) echo "fastp 0.23.4" >&2; exit 0 ;;
    -i) in1="$2"; shift 2 ;;
    -I) in2="$2"; shift 2 ;;
    -o) out1="$2"; shift 2 ;;
    -O) out2="$2"; shift 2 ;;
    --json) json="$2"; shift 2 ;;
    --html) html="$2"; shift 2 ;;
    -w|-q|-l|-t) shift 2 ;;
    *) shift ;;
  esac
done
case "$(basename "$in1")" in
  *badtrim*) echo "ERROR: broken reads in $in1"; exit 1 ;;
  *emptytrim*) : > "$out1"; : > "$out2"; exit 0 ;;
esac
printf '@r1\\nACGT\\n+\\nIIII\\n' > "$out1"
printf '@r1\\nACGT\\n+\\nIIII\\n' > "$out2"
echo '{}' > "$json"
echo '<html></html>' > "$html"
echo "fastp trimmed $in1 $in2"
"""

MULTIQC_STUB = """#!/bin/sh
echo "multiqc $*" >> "$STUB_LOG"
outdir="."
filename="multiqc_report.html"
n=0
while [ $# -gt 0 ]; do
  case "$1" in
    --version) echo "multiqc, version 1.21"; exit 0 ;;
    --outdir) outdir="$2"; shift 2 ;;
    --filename) filename="$2"; shift 2 ;;
    --module) shift 2 ;;
    -*) shift ;;
    *) n=$((n + $(ls "$1" | grep -c '_fastqc.html'))); shift ;;
  esac
done
echo "TZ=$TZ"
if [ "$n" -eq 0 ]; then
  echo "No analysis results found"
  exit 0
fi
echo "<html>$n reports</html>" > "$outdir/$filename"
"""

STUBS = {"fastqc": FASTQC_STUB, "fastp": FASTP_STUB, "multiqc": MULTIQC_STUB}


def _write_exe(fname, content):
    with open(fname, "w") as out_handle:
        out_handle.write(content)
    os.chmod(fname, os.stat(fname).st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return fname


@pytest.fixture
def stub_bin(tmp_path, monkeypatch):
    """Directory of stub QC programs placed first on PATH.

    Each call is appended to the file in STUB_LOG for later inspection;
    see `stub_calls`.
    """
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    for name, content in STUBS.items():
        _write_exe(str(bin_dir / name), content)
    monkeypatch.setenv("PATH", str(bin_dir) + os.pathsep + os.environ.get("PATH", ""))
    monkeypatch.setenv("STUB_LOG", str(tmp_path / "stub_calls.txt"))
    return bin_dir


@pytest.fixture
def stub_calls(tmp_path):
    """Recorded stub invocations, ignoring version lookups."""
    def calls(prog=None):
        fname = tmp_path / "stub_calls.txt"
        if not fname.exists():
            return []
        lines = [l for l in fname.read_text().splitlines()
                 if l.strip() and "--version" not in l.split()]
        return [l for l in lines if prog is None or l.split()[0] == prog]
    return calls


def write_fastq(fname, reads=1):
    with gzip.open(fname, "wt") as out_handle:
        for i in range(reads):
            out_handle.write("@read%s\nACGTACGT\n+\nIIIIIIII\n" % i)
    return str(fname)


@pytest.fixture
def reads_dir(tmp_path):
    """Factory creating an input folder holding the named read files."""
    in_dir = tmp_path / "reads"
    in_dir.mkdir()

    def make(*names):
        for name in names:
            write_fastq(in_dir / name)
        return str(in_dir)
    return make


@pytest.fixture
def out_dir(tmp_path):
    return str(tmp_path / "qc_out")


@pytest.fixture
def make_run_config(out_dir):
    def make(input_dir, **kwargs):
        values = {"input_dir": input_dir, "out_dir": out_dir, "num_threads": 2,
                  "naming_rules": config_utils.DEFAULT_NAMING_RULES, "num_cores": 1,
                  "resources": {}, "tolerate_failures": ()}
        values.update(kwargs)
        return config_utils.RunConfig(**values)
    return make


@pytest.fixture
def write_exe(tmp_path):
    """Write a shell script outside the stub PATH, returning its path."""
    def make(name, content):
        return _write_exe(str(tmp_path / name), content)
    return make
