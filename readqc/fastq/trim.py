"""Quality and adapter trimming of paired reads with fastp.

https://github.com/OpenGene/fastp
"""
import os

from readqc import utils
from readqc.pipeline import config_utils
from readqc.provenance import do

STAGE = "fastp"

# quality 28 window cutting, overrepresentation analysis, polyG trimming,
# minimum length 40 and 5 bases trimmed from read 1 tails
DEFAULT_OPTIONS = ["-q", "28", "-p", "-g", "-l", "40", "--cut_tail", "-t", "5"]

def trimmed_files(sample_id, out_dir):
    """Expected trimmed read pair for a sample.
    """
    return [os.path.join(out_dir, "%s_R1_trimmed.fastq.gz" % sample_id),
            os.path.join(out_dir, "%s_R2_trimmed.fastq.gz" % sample_id)]

def report_files(sample_id, out_dir):
    return [os.path.join(out_dir, "%s_fastp.json" % sample_id),
            os.path.join(out_dir, "%s_fastp.html" % sample_id)]

def remove_outputs(sample_id, trim_dir):
    """Clear trimmed reads and fastp reports left by an earlier run.
    """
    out_dir = os.path.join(trim_dir, sample_id)
    for f in trimmed_files(sample_id, out_dir) + report_files(sample_id, out_dir):
        utils.remove_safe(f)

def run(sample_id, fastq_files, trim_dir, log_dir, config):
    """Trim a read pair into a per-sample directory.

    Returns the StageResult along with the trimmed output files.
    """
    out_dir = utils.safe_makedir(os.path.join(trim_dir, sample_id))
    out_files = trimmed_files(sample_id, out_dir)
    cl = _get_args(fastq_files, out_files, report_files(sample_id, out_dir), config)
    log_file = os.path.join(log_dir, "%s_%s.log" % (sample_id, STAGE))
    result = do.run(config_utils.get_program("fastp", config), cl, log_file,
                    sample_id=sample_id, stage=STAGE,
                    timeout=config_utils.get_timeout("fastp", config))
    return result, out_files

def outputs_ok(out_files):
    """Both trimmed files need to be present with content.
    """
    return all(do.file_nonempty(f)() for f in out_files)

def _get_args(fastq_files, out_files, reports, config):
    fq1, fq2 = fastq_files
    out1, out2 = out_files
    json_file, html_file = reports
    opts = config_utils.get_resources("fastp", config).get("options")
    opts = DEFAULT_OPTIONS if opts is None else [str(x) for x in opts]
    return (["-i", fq1, "-I", fq2, "-o", out1, "-O", out2,
             "--json", json_file, "--html", html_file] +
            opts + ["-w", config.num_threads])
