"""Build run configuration from command line arguments and optional YAML files.
"""
import collections
import os

import toolz as tz
import yaml

from readqc import utils

REQUIRED_TOOLS = ["fastqc", "fastp", "multiqc"]
TOLERABLE_STAGES = ["fastqc_raw", "fastqc_trimmed"]
DEFAULT_THREADS = 8

class ConfigError(ValueError):
    pass

class NamingRule(collections.namedtuple("NamingRule",
                                        ["forward_glob", "forward_marker", "reverse_marker"])):
    """Convention relating a forward read file to its reverse mate.
    """
    __slots__ = ()

    def mate(self, forward_path):
        """Reverse read path for a forward read, or None if the marker is absent.

        Only the file name is rewritten, using the last marker occurrence.
        """
        dirname, fname = os.path.split(forward_path)
        idx = fname.rfind(self.forward_marker)
        if idx < 0:
            return None
        fname = fname[:idx] + self.reverse_marker + fname[idx + len(self.forward_marker):]
        return os.path.join(dirname, fname)

DEFAULT_NAMING_RULES = (NamingRule("*_R1_001.fastq.gz", "_R1_001", "_R2_001"),
                        NamingRule("*_1.fastq.gz", "_1.", "_2."))

RunConfig = collections.namedtuple("RunConfig",
                                   ["input_dir", "out_dir", "num_threads", "naming_rules",
                                    "num_cores", "resources", "tolerate_failures"])

def make_config(input_dir, out_dir, num_threads=DEFAULT_THREADS, config_file=None,
                num_cores=None):
    """Create a RunConfig, merging command line values over a YAML configuration file.
    """
    config = load_config_file(config_file) if config_file else {}
    if num_cores is None:
        num_cores = tz.get_in(["algorithm", "num_cores"], config, 1)
    run_config = RunConfig(input_dir=os.path.abspath(input_dir),
                           out_dir=os.path.abspath(out_dir),
                           num_threads=_positive_int(num_threads, "threads"),
                           naming_rules=_get_naming_rules(config),
                           num_cores=_positive_int(num_cores, "num_cores"),
                           resources=_get_resources_section(config),
                           tolerate_failures=_get_tolerated(config))
    validate(run_config)
    return run_config

def load_config_file(config_file):
    """Load a YAML configuration file, ensuring a top level mapping.
    """
    if not os.path.exists(config_file):
        raise ConfigError("Configuration file '%s' not found." % config_file)
    try:
        with open(config_file) as in_handle:
            config = yaml.safe_load(in_handle)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError("Cannot read configuration file '%s': %s" % (config_file, e)) from e
    if config is None:
        config = {}
    if not isinstance(config, dict):
        raise ConfigError("Configuration file '%s' must contain a mapping." % config_file)
    return config

def validate(config):
    """Check input and output locations before any work starts.
    """
    if not os.path.isdir(config.input_dir):
        raise ConfigError("Input folder '%s' not found." % config.input_dir)
    if os.path.exists(config.out_dir) and not os.path.isdir(config.out_dir):
        raise ConfigError("Output folder '%s' is not a directory." % config.out_dir)
    if not utils.is_writable_dir(config.out_dir):
        raise ConfigError("Cannot create or write to output folder '%s'" % config.out_dir)

def _positive_int(value, name):
    try:
        value = int(value)
    except (TypeError, ValueError):
        raise ConfigError("Expected an integer for %s, got '%s'" % (name, value))
    if value < 1:
        raise ConfigError("Expected a positive value for %s, got %s" % (name, value))
    return value

def _get_naming_rules(config):
    patterns = config.get("naming_patterns")
    if patterns is None:
        return DEFAULT_NAMING_RULES
    if not isinstance(patterns, (list, tuple)) or not patterns:
        raise ConfigError("naming_patterns must be a non-empty list of rules.")
    rules = []
    for pattern in patterns:
        if not isinstance(pattern, dict):
            raise ConfigError("Invalid naming pattern: %s" % pattern)
        try:
            rule = NamingRule(*[str(pattern[k]) for k in NamingRule._fields])
        except KeyError as e:
            raise ConfigError("Naming pattern %s missing key %s" % (pattern, e)) from e
        if not rule.forward_marker or not rule.reverse_marker:
            raise ConfigError("Naming pattern %s needs non-empty markers" % pattern)
        if rule.forward_marker == rule.reverse_marker:
            raise ConfigError("Naming pattern %s maps reads onto themselves" % pattern)
        rules.append(rule)
    return tuple(rules)

def _get_resources_section(config):
    resources = config.get("resources") or {}
    if not isinstance(resources, dict) or not all(isinstance(v, dict) for v in resources.values()):
        raise ConfigError("resources must map program names to settings.")
    return resources

def _get_tolerated(config):
    tolerated = tz.get_in(["algorithm", "tolerate_failures"], config) or []
    if isinstance(tolerated, str):
        tolerated = [tolerated]
    unknown = [x for x in tolerated if x not in TOLERABLE_STAGES]
    if unknown:
        raise ConfigError("Cannot tolerate failures in %s; choose from %s" %
                          (", ".join(unknown), ", ".join(TOLERABLE_STAGES)))
    return tuple(tolerated)

# ## Retrieval functions

def get_resources(name, config):
    """Retrieve resources for a program, pulling from multiple config sources.
    """
    return tz.get_in([name], config.resources, {})

def get_program(name, config):
    """Retrieve the command for a program, allowing configured overrides.
    """
    cmd = get_resources(name, config).get("cmd", name)
    return os.path.expandvars(os.path.expanduser(str(cmd)))

def get_timeout(name, config):
    timeout = get_resources(name, config).get("timeout")
    return float(timeout) if timeout else None
