"""Retrieve paired read inputs and organize the output directory layout.

Discovery is a pure pass over the input directory, kept separate from
running any external programs.
"""
import collections
import glob
import os

from readqc import utils
from readqc.log import logger
from readqc.pipeline.config_utils import ConfigError

DISCOVERED = "discovered"
RAW_QC_DONE = "raw_qc_done"
TRIMMED = "trimmed"
POST_QC_DONE = "post_qc_done"

SampleUnit = collections.namedtuple("SampleUnit",
                                    ["sample_id", "forward", "reverse", "stage", "failed_stage"])
MissingMate = collections.namedtuple("MissingMate", ["sample_id", "forward", "reverse"])
Discovery = collections.namedtuple("Discovery", ["samples", "missing"])

OUT_SUBDIRS = collections.OrderedDict([("fastqc_pre", "fastqc_pre_trim"),
                                       ("trimmed", "trimmed"),
                                       ("fastqc_post", "fastqc_post_trim"),
                                       ("multiqc", "multiqc"),
                                       ("logs", "logs")])

def sample_name(fname, marker=None):
    """Sample identifier from the first two underscore separated name fields.

    Fields are taken from the file name before the read marker, so
    `s1_R1_001.fastq.gz` gives `s1` and `Tumor_S3_L001_R1_001.fastq.gz`
    gives `Tumor_S3`.
    """
    base = os.path.basename(fname)
    idx = base.rfind(marker) if marker else -1
    stem = base[:idx] if idx > 0 else utils.splitext_plus(base)[0]
    return "_".join(stem.split("_")[:2])

def discover(input_dir, naming_rules):
    """Find forward/reverse read pairs in a directory.

    Rules are applied in order and a file already picked up by an earlier
    rule is never reconsidered. Forward reads without a mate are returned
    separately so callers can report them.
    """
    samples = []
    missing = []
    seen = set()
    for rule in naming_rules:
        for forward in sorted(glob.glob(os.path.join(glob.escape(input_dir), rule.forward_glob))):
            if not os.path.isfile(forward):
                continue
            key = os.path.realpath(forward)
            if key in seen:
                continue
            seen.add(key)
            reverse = rule.mate(forward)
            name = sample_name(forward, rule.forward_marker)
            if reverse is None or not os.path.isfile(reverse):
                logger.warning("Skipping %s: R2 missing (expected %s)." %
                               (forward, reverse or "a file with %s" % rule.reverse_marker))
                missing.append(MissingMate(name, forward, reverse))
                continue
            seen.add(os.path.realpath(reverse))
            samples.append(SampleUnit(name, forward, reverse, DISCOVERED, None))
    return Discovery(samples, missing)

def check_unique(samples):
    """Ensure derived sample identifiers do not collide.
    """
    by_name = collections.defaultdict(list)
    for sample in samples:
        by_name[sample.sample_id].append(sample.forward)
    dups = [(name, fnames) for name, fnames in by_name.items() if len(fnames) > 1]
    if dups:
        raise ConfigError("Sample names derived from input files are not unique: %s" %
                          "; ".join("%s from %s" % (name, ", ".join(fnames)) for name, fnames in dups))
    return samples

def setup_directories(out_dir):
    """Create the output directory layout, returning a name to path lookup.
    """
    dirs = {"base": out_dir}
    try:
        utils.safe_makedir(out_dir)
        for key, subdir in OUT_SUBDIRS.items():
            dirs[key] = utils.safe_makedir(os.path.join(out_dir, subdir))
    except OSError as e:
        raise ConfigError("Cannot create or write to output folder '%s': %s" % (out_dir, e)) from e
    return dirs
