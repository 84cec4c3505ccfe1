"""Run FastQC on paired reads before and after trimming.

http://www.bioinformatics.babraham.ac.uk/projects/fastqc/
"""
import os

from readqc import utils
from readqc.pipeline import config_utils
from readqc.provenance import do

RAW_STAGE = "fastqc_raw"
TRIMMED_STAGE = "fastqc_trimmed"

def run(sample_id, fastq_files, out_dir, log_dir, config, stage=RAW_STAGE):
    """Generate FastQC reports for a read pair into a shared output directory.
    """
    cl = _get_args(fastq_files, out_dir, config)
    log_file = os.path.join(log_dir, "%s_%s.log" % (sample_id, stage))
    return do.run(config_utils.get_program("fastqc", config), cl, log_file,
                  sample_id=sample_id, stage=stage,
                  timeout=config_utils.get_timeout("fastqc", config))

def _get_args(fastq_files, out_dir, config):
    opts = [str(x) for x in config_utils.get_resources("fastqc", config).get("options", [])]
    return ["-t", config.num_threads] + opts + ["-o", out_dir] + list(fastq_files)

def report_file(fastq_file, out_dir):
    """HTML report FastQC names after an input file.
    """
    base = os.path.basename(fastq_file)
    if base.endswith((".gz", ".bz2")):
        base = os.path.splitext(base)[0]
    for ext in [".fastq", ".fq", ".txt", ".sam", ".bam"]:
        if base.endswith(ext):
            base = base[:-len(ext)]
            break
    return os.path.join(out_dir, "%s_fastqc.html" % base)

def reports_present(fastq_files, out_dir):
    return all(utils.file_exists(report_file(f, out_dir)) for f in fastq_files)

def remove_reports(fastq_files, out_dir):
    """Clear reports left for these inputs by an earlier run.
    """
    for f in fastq_files:
        html_file = report_file(f, out_dir)
        utils.remove_safe(html_file)
        utils.remove_safe("%s.zip" % os.path.splitext(html_file)[0])
