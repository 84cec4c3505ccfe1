"""High level summary of FastQC reports with MultiQC.

https://github.com/ewels/MultiQC
"""
import os

from readqc import utils
from readqc.log import logger
from readqc.pipeline import config_utils
from readqc.provenance import do

STAGE = "multiqc"
SAMPLE_ID = "all"
LOG_NAME = "multiqc_final.log"
REPORT_NAME = "multiqc_report.html"

PRESENT = "present"
EMPTY = "empty"
MISSING = "missing"

def summary(in_dirs, out_dir, log_dir, config):
    """Aggregate whatever FastQC reports exist in the input directories.

    Any report left by an earlier run is removed first, so the returned
    location only holds output from this call. Returns the StageResult and
    the expected report location.
    """
    report_name = config_utils.get_resources("multiqc", config).get("filename", REPORT_NAME)
    other_opts = [str(x) for x in config_utils.get_resources("multiqc", config).get("options", [])]
    cl = (list(in_dirs) +
          ["--module", "fastqc", "--force", "--no-ansi",
           "--filename", report_name, "--outdir", out_dir, "--verbose"] +
          other_opts)
    report_file = os.path.join(out_dir, report_name)
    utils.remove_safe(report_file)
    result = do.run(config_utils.get_program("multiqc", config), cl,
                    os.path.join(log_dir, LOG_NAME),
                    sample_id=SAMPLE_ID, stage=STAGE,
                    env={"TZ": "UTC"},
                    timeout=config_utils.get_timeout("multiqc", config))
    return result, report_file

def verify(report_file):
    """Classify the aggregate report as present, empty or missing.
    """
    if not os.path.exists(report_file):
        return MISSING
    elif not utils.file_exists(report_file):
        return EMPTY
    else:
        return PRESENT

def warn_report(status, report_file, log_file):
    if status == PRESENT:
        logger.info("MultiQC report: %s" % report_file)
        return
    if status == EMPTY:
        logger.warning("WARNING: MultiQC produced an empty report at %s." % report_file)
    else:
        logger.warning("WARNING: MultiQC ran but no report was generated.")
    logger.warning("Check if FastQC reports exist in the pre and post trimming folders.")
    logger.warning("See MultiQC log: %s" % log_file)
