#!/usr/bin/env python
"""Run quality control over a folder of paired-end FASTQ files.

Usage:
  readqc_pipeline.py -i <input_reads_folder> -o <output_folder> [-t <threads>]
     -i folder with raw FASTQ files (required)
     -o output folder for all results (required)
     -t number of threads for each tool [default: 8]
     -n samples to process at once within a stage [default: 1]
     -c YAML configuration with naming patterns and tool resources
"""
import sys

from readqc.commandline import main

if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
