"""Command line interface for running the paired read QC pipeline.
"""
import argparse
import sys

from readqc import log
from readqc.log import logger
from readqc.pipeline import config_utils
from readqc.pipeline.main import run_main
from readqc.provenance import do

class UsageParser(argparse.ArgumentParser):
    """Report usage problems on stdout with exit status 1.
    """
    def error(self, message):
        self.print_usage(sys.stdout)
        sys.stdout.write("ERROR: %s\n" % message)
        sys.exit(1)

def _positive_int(value):
    try:
        value = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError("invalid integer value: '%s'" % value)
    if value < 1:
        raise argparse.ArgumentTypeError("must be a positive integer, got %s" % value)
    return value

def parse_cl_args(in_args):
    """Parse input commandline arguments, exiting with usage on errors.
    """
    description = ("Quality control of paired-end reads: FastQC before and after "
                   "fastp trimming, summarized with MultiQC.")
    parser = UsageParser(description=description, add_help=False)
    parser.add_argument("-i", "--input", required=True,
                        help="Folder with raw FASTQ files (required)")
    parser.add_argument("-o", "--outdir", required=True,
                        help="Output folder for all results (required)")
    parser.add_argument("-t", "--threads", type=_positive_int, default=config_utils.DEFAULT_THREADS,
                        help="Number of threads for each tool [default: %(default)s]")
    parser.add_argument("-n", "--numcores", type=_positive_int, default=None,
                        help="Samples to process at once within a stage [default: 1]")
    parser.add_argument("-c", "--config",
                        help="YAML configuration with naming patterns and tool resources")
    parser.add_argument("-h", "--help", action="store_true",
                        help="Show this help and exit")
    if "-h" in in_args or "--help" in in_args:
        parser.print_help(sys.stdout)
        sys.exit(1)
    return parser.parse_args(in_args)

def main(in_args=None):
    if in_args is None:
        in_args = sys.argv[1:]
    args = parse_cl_args(in_args)
    handler = log.setup_local_logging()
    try:
        config = config_utils.make_config(args.input, args.outdir, args.threads,
                                          config_file=args.config, num_cores=args.numcores)
        run_main(config)
    except (config_utils.ConfigError, do.ToolUnavailable) as e:
        logger.error("ERROR: %s" % e)
        return 1
    finally:
        log.close_handler(handler)
    return 0
