"""Main entry point for the paired read QC pipeline.

Runs FastQC on raw reads, fastp trimming, FastQC on trimmed reads and a
final MultiQC summary. Each stage finishes for every sample before the next
begins, and a sample failing a stage drops out of later stages without
stopping the rest of the batch.
"""
import os

from readqc import log, utils
from readqc.distributed import multi
from readqc.fastq import trim
from readqc.log import logger
from readqc.pipeline import config_utils, qcsummary, run_info
from readqc.provenance import do, profile, programs
from readqc.qc import fastqc, multiqc

def run_main(config):
    """Run the full pipeline for a RunConfig, returning the final RunReport.

    Raises ConfigError or ToolUnavailable before any output is written.
    """
    config_utils.validate(config)
    tools = programs.check_tools(config)
    discovery = run_info.discover(config.input_dir, config.naming_rules)
    samples = run_info.check_unique(discovery.samples)
    dirs = run_info.setup_directories(config.out_dir)
    handler = log.setup_file_logging(dirs["logs"])
    try:
        logger.info("QC pipeline started")
        logger.info("Output folder: %s" % config.out_dir)
        logger.info("Found %s sample pairs in %s" % (len(samples), config.input_dir))
        programs.write_versions(dirs, tools)
        report = _run_stages(samples, discovery.missing, config, dirs)
        qcsummary.write_summary(report, dirs)
        qcsummary.print_summary(report, dirs)
    finally:
        log.close_handler(handler)
    return report

def _run_stages(samples, missing, config, dirs):
    results = []
    failures = []
    _clear_outputs(samples, dirs)
    stages = [("Step 1: FastQC on raw reads", _raw_qc),
              ("Step 2: Trimming with fastp", _trim),
              ("Step 3: FastQC on trimmed reads", _trimmed_qc)]
    for label, fn in stages:
        with profile.report(label):
            todo = [(s, config, dirs) for s in samples if not s.failed_stage]
            done = {s.sample_id: s for s in samples}
            for sample, stage_results, failure in multi.run_multicore(fn, todo, config.num_cores,
                                                                      label):
                done[sample.sample_id] = sample
                results.extend(stage_results)
                if failure:
                    failures.append(failure)
            samples = [done[s.sample_id] for s in samples]
    with profile.report("Step 4: Aggregating reports with MultiQC"):
        result, report_file = multiqc.summary([dirs["fastqc_pre"], dirs["fastqc_post"]],
                                              dirs["multiqc"], dirs["logs"], config)
        results.append(result)
        if result.exit_code != 0:
            logger.warning("MultiQC exited with code %s, see %s" % (result.exit_code, result.log_file))
    status = multiqc.verify(report_file)
    multiqc.warn_report(status, report_file, result.log_file)
    return qcsummary.make_report(samples, missing, results, failures, report_file, status)

def _clear_outputs(samples, dirs):
    """Remove per-sample outputs from a previous run into the same folder.

    Samples dropping out early must not leave later stage reports for MultiQC.
    """
    for s in samples:
        fastqc.remove_reports([s.forward, s.reverse], dirs["fastqc_pre"])
        trim.remove_outputs(s.sample_id, dirs["trimmed"])
        fastqc.remove_reports(trim.trimmed_files(s.sample_id, dirs["trimmed"]),
                              dirs["fastqc_post"])

# ## Per sample stages

def _raw_qc(sample, config, dirs):
    unreadable = [f for f in [sample.forward, sample.reverse] if not utils.file_readable(f)]
    if unreadable:
        return _fail(sample, fastqc.RAW_STAGE, [], "unreadable input %s" % ", ".join(unreadable))
    logger.info("FastQC (raw): %s" % sample.sample_id)
    return _run_qc(sample, [sample.forward, sample.reverse], dirs["fastqc_pre"],
                   fastqc.RAW_STAGE, run_info.RAW_QC_DONE, config, dirs)

def _trimmed_qc(sample, config, dirs):
    logger.info("FastQC (trimmed): %s" % sample.sample_id)
    in_files = trim.trimmed_files(sample.sample_id, os.path.join(dirs["trimmed"], sample.sample_id))
    return _run_qc(sample, in_files, dirs["fastqc_post"],
                   fastqc.TRIMMED_STAGE, run_info.POST_QC_DONE, config, dirs)

def _run_qc(sample, in_files, out_dir, stage, next_state, config, dirs):
    try:
        result = fastqc.run(sample.sample_id, in_files, out_dir, dirs["logs"], config, stage=stage)
    except (do.ToolUnavailable, do.LogWriteFailure) as e:
        return _fail(sample, stage, [], str(e))
    if result.exit_code != 0:
        reason = "exit code %s, see %s" % (result.exit_code, result.log_file)
    elif not fastqc.reports_present(in_files, out_dir):
        reason = "missing FastQC reports in %s, see %s" % (out_dir, result.log_file)
    else:
        reason = None
    if reason:
        if stage in config.tolerate_failures:
            logger.warning("%s failed for %s (%s); continuing" % (stage, sample.sample_id, reason))
            return (sample._replace(stage=next_state), [result],
                    qcsummary.StageFailure(sample.sample_id, stage, reason))
        return _fail(sample, stage, [result], reason)
    return sample._replace(stage=next_state), [result], None

def _trim(sample, config, dirs):
    logger.info("fastp: %s" % sample.sample_id)
    try:
        result, out_files = trim.run(sample.sample_id, [sample.forward, sample.reverse],
                                     dirs["trimmed"], dirs["logs"], config)
    except (do.ToolUnavailable, do.LogWriteFailure) as e:
        return _fail(sample, trim.STAGE, [], str(e))
    if result.exit_code != 0:
        return _fail(sample, trim.STAGE, [result],
                     "exit code %s, see %s" % (result.exit_code, result.log_file))
    if not trim.outputs_ok(out_files):
        return _fail(sample, trim.STAGE, [result],
                     "missing or empty trimmed reads in %s" % os.path.dirname(out_files[0]))
    return sample._replace(stage=run_info.TRIMMED), [result], None

def _fail(sample, stage, results, reason):
    logger.warning("Sample %s failed at %s: %s. Skipping remaining stages for this sample." %
                   (sample.sample_id, stage, reason))
    return (sample._replace(failed_stage=stage), results,
            qcsummary.StageFailure(sample.sample_id, stage, reason))
