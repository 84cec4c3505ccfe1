"""Summarize a finished run: per sample outcomes, stage results and report status.
"""
import collections
import os

import yaml

from readqc.log import logger, logger_stdout
from readqc.pipeline import run_info

StageFailure = collections.namedtuple("StageFailure", ["sample_id", "stage", "reason"])

class RunReport(collections.namedtuple("RunReport",
                                       ["samples", "missing", "results", "failures",
                                        "report_file", "report_status"])):
    """Final, read-only outcome of one pipeline invocation.
    """
    __slots__ = ()

    @property
    def completed(self):
        return [x for x in self.samples if x.stage == run_info.POST_QC_DONE and not x.failed_stage]

    @property
    def failed(self):
        return [x for x in self.samples if x.failed_stage]

def make_report(samples, missing, results, failures, report_file, report_status):
    return RunReport(tuple(samples), tuple(missing), tuple(results), tuple(failures),
                     report_file, report_status)

def _to_dict(report):
    return {"samples": [{"sample": s.sample_id, "forward": s.forward, "reverse": s.reverse,
                         "stage": s.stage, "failed_stage": s.failed_stage}
                        for s in report.samples],
            "missing_mates": [{"sample": m.sample_id, "forward": m.forward, "reverse": m.reverse}
                              for m in report.missing],
            "stages": [dict(r._asdict()) for r in report.results],
            "failures": [dict(f._asdict()) for f in report.failures],
            "multiqc": {"report": report.report_file, "status": report.report_status}}

def write_summary(report, dirs):
    """Write the run report as YAML in the log directory.
    """
    out_file = os.path.join(dirs["logs"], "run_summary.yaml")
    with open(out_file, "w") as out_handle:
        yaml.safe_dump(_to_dict(report), out_handle, default_flow_style=False, sort_keys=False)
    return out_file

def print_summary(report, dirs):
    """Operator facing summary of where outputs live and what went wrong.
    """
    logger.info("QC pipeline completed: %s of %s samples passed all stages, %s failed." %
                (len(report.completed), len(report.samples), len(report.failed)))
    for m in report.missing:
        logger.warning("Sample %s skipped: missing mate for %s" % (m.sample_id, m.forward))
    for f in report.failures:
        logger.warning("Sample %s failed at %s: %s" % (f.sample_id, f.stage, f.reason))
    lines = ["Output written to: %s" % dirs["base"],
             " |-- fastqc_pre_trim/     <- FastQC before trimming",
             " |-- trimmed/             <- trimmed reads + fastp reports",
             " |-- fastqc_post_trim/    <- FastQC after trimming",
             " |-- multiqc/             <- final report summary",
             " `-- logs/                <- tool logs per sample"]
    for line in lines:
        logger_stdout.info(line)
