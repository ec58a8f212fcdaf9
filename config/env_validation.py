# ============================================================================
# ENVIRONMENT VARIABLE VALIDATION
# ============================================================================
# STATUS: Configuration - Pre-run validation with regex patterns
# PURPOSE: Validate env vars before a bootstrap run to fail fast with clear
#          error messages
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================
"""
Environment Variable Validation Module.

Validates environment variables before a run using regex patterns to catch
configuration errors EARLY with clear, actionable error messages.

Design Philosophy:
    - FAIL FAST: Catch config errors before the first connection attempt
    - CLEAR ERRORS: Show exactly what's wrong and how to fix it
    - REGEX VALIDATION: Format validation, not just presence checks
    - ZERO DEPENDENCIES: Only standard library imports

Usage:
    from config.env_validation import validate_environment, ENV_VAR_RULES

    # Returns list of ValidationError (empty if all valid)
    errors = validate_environment()

    for error in errors:
        print(f"{error.var_name}: {error.message}")
        print(f"  Current value: {error.current_value}")
        print(f"  Expected: {error.expected_pattern}")
        print(f"  Fix: {error.fix_suggestion}")

Example Validations:
    - DB_HOST must be a hostname or IPv4 address
    - DB_PORT must be a positive integer
    - DB_NAMESPACE must be a lowercase PostgreSQL identifier
    - BOOTSTRAP_RETRY_DELAY_SECONDS must be a non-negative number
    - One of DB_HOST / PROVISIONING_OUTPUT must be set

Exports:
    ENV_VAR_RULES: Dict of all validation rules
    ValidationError: Dataclass for validation errors
    validate_environment: Main validation function
    validate_single_var: Validate one variable
"""

import os
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Pattern, Any


# ============================================================================
# VALIDATION ERROR
# ============================================================================

@dataclass
class ValidationError:
    """Result of a failed environment variable validation."""
    var_name: str
    message: str
    current_value: Optional[str]
    expected_pattern: str
    fix_suggestion: str
    severity: str = "error"  # error, warning

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for JSON serialization."""
        return {
            "var_name": self.var_name,
            "message": self.message,
            "current_value": self._mask_sensitive(self.current_value),
            "expected_pattern": self.expected_pattern,
            "fix_suggestion": self.fix_suggestion,
            "severity": self.severity,
        }

    def _mask_sensitive(self, value: Optional[str]) -> Optional[str]:
        """Mask potentially sensitive values."""
        if value is None:
            return None
        sensitive_keywords = ["password", "secret", "key", "token"]
        var_lower = self.var_name.lower()
        if any(kw in var_lower for kw in sensitive_keywords):
            return "***MASKED***"
        if len(value) > 30:
            return f"{value[:20]}...({len(value)} chars)"
        return value


# ============================================================================
# VALIDATION RULE DEFINITION
# ============================================================================

@dataclass
class EnvVarRule:
    """
    Validation rule for an environment variable.

    Attributes:
        pattern: Compiled regex pattern for validation
        pattern_description: Human-readable description of expected format
        required: Whether this variable must be set
        fix_suggestion: How to fix if validation fails
        example: Example valid value
        allow_empty: Allow empty string (default False)
        default_value: Default value used if not set (for warning messages)
        warn_on_default: Emit warning when using default value
    """
    pattern: Pattern
    pattern_description: str
    required: bool
    fix_suggestion: str
    example: str
    allow_empty: bool = False
    default_value: Optional[str] = None
    warn_on_default: bool = True


# ============================================================================
# VALIDATION RULES - Single source of truth for env var formats
# ============================================================================

_HOSTNAME_OR_IPV4 = re.compile(
    r"^[a-zA-Z0-9]([a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?(\.[a-zA-Z0-9]([a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)
_SCHEMA_NAME = re.compile(r"^[a-z_][a-z0-9_]{0,62}$")
_DATABASE_NAME = re.compile(r"^[a-zA-Z][a-zA-Z0-9_-]{0,62}$")
_ROLE_NAME = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_$-]{0,62}$")
_POSITIVE_INT = re.compile(r"^[1-9][0-9]*$")
_NON_NEGATIVE_NUMBER = re.compile(r"^[0-9]+(\.[0-9]+)?$")
_BOOLEAN = re.compile(r"^(true|false|1|0|yes|no)$", re.IGNORECASE)
_FILE_PATH = re.compile(r"^[^\x00]+$")


ENV_VAR_RULES: Dict[str, EnvVarRule] = {
    # =========================================================================
    # ENDPOINT (Critical - connectivity)
    # =========================================================================
    "DB_HOST": EnvVarRule(
        pattern=_HOSTNAME_OR_IPV4,
        pattern_description="Hostname or IPv4 address of the database node",
        required=False,  # PROVISIONING_OUTPUT may supply the address instead
        fix_suggestion="Set to the node's public IP or DNS name, or set PROVISIONING_OUTPUT",
        example="203.0.113.10",
        warn_on_default=False,
    ),

    "DB_PORT": EnvVarRule(
        pattern=_POSITIVE_INT,
        pattern_description="Positive integer (default 5432)",
        required=False,
        fix_suggestion="Use a valid port number like 5432",
        example="5432",
        default_value="5432",
    ),

    "DB_USER": EnvVarRule(
        pattern=_ROLE_NAME,
        pattern_description="PostgreSQL role name",
        required=True,
        fix_suggestion="Set to the role the container was started with",
        example="postgres",
    ),

    "DB_PASSWORD": EnvVarRule(
        pattern=re.compile(r"^.+$"),
        pattern_description="Non-empty password",
        required=False,
        fix_suggestion="Set the role password (omit only for trust authentication)",
        example="********",
        warn_on_default=False,
    ),

    "DB_NAME": EnvVarRule(
        pattern=_DATABASE_NAME,
        pattern_description="Database to connect to (letters, numbers, underscore, hyphen)",
        required=False,
        fix_suggestion="Use the maintenance database or an existing database name",
        example="postgres",
        default_value="postgres",
    ),

    "DB_NAMESPACE": EnvVarRule(
        pattern=_SCHEMA_NAME,
        pattern_description="Lowercase schema name (letters, numbers, underscore)",
        required=False,
        fix_suggestion="Set schema name like 'app'",
        example="app",
        default_value="app",
    ),

    "DB_CONNECT_TIMEOUT": EnvVarRule(
        pattern=_POSITIVE_INT,
        pattern_description="Per-attempt connect timeout in seconds",
        required=False,
        fix_suggestion="Set a small positive integer like 5",
        example="5",
        default_value="5",
        warn_on_default=False,
    ),

    # =========================================================================
    # RETRY POLICY
    # =========================================================================
    "BOOTSTRAP_MAX_ATTEMPTS": EnvVarRule(
        pattern=_POSITIVE_INT,
        pattern_description="Positive integer number of connection attempts",
        required=False,
        fix_suggestion="Set to cover the container's expected startup time",
        example="10",
        default_value="10",
    ),

    "BOOTSTRAP_RETRY_DELAY_SECONDS": EnvVarRule(
        pattern=_NON_NEGATIVE_NUMBER,
        pattern_description="Non-negative number of seconds between attempts",
        required=False,
        fix_suggestion="Set a fixed delay like 10",
        example="10",
        default_value="10",
    ),

    # =========================================================================
    # PROVISIONING BOUNDARY & SEED DATA
    # =========================================================================
    "PROVISIONING_OUTPUT": EnvVarRule(
        pattern=_FILE_PATH,
        pattern_description="Path to the provisioning engine's JSON output",
        required=False,
        fix_suggestion="Point at the file written by `terraform output -json > outputs.json`",
        example="infra/outputs.json",
        warn_on_default=False,
    ),

    "PROVISIONING_ADDRESS_KEY": EnvVarRule(
        pattern=re.compile(r"^[a-zA-Z_][a-zA-Z0-9_-]*$"),
        pattern_description="Output name holding the node address",
        required=False,
        fix_suggestion="Set to the output name of the node's address",
        example="public_ip",
        default_value="public_ip",
        warn_on_default=False,
    ),

    "SEED_FILE": EnvVarRule(
        pattern=_FILE_PATH,
        pattern_description="Path to a JSON seed file",
        required=False,
        fix_suggestion="Point at a JSON file with 'collection' and 'records' keys",
        example="seed/users.json",
        warn_on_default=False,
    ),

    # =========================================================================
    # OBSERVABILITY
    # =========================================================================
    "LOG_FORMAT": EnvVarRule(
        pattern=re.compile(r"^(console|json)$", re.IGNORECASE),
        pattern_description="Log output format (console, json)",
        required=False,
        fix_suggestion="Set to 'json' when shipping logs, 'console' for operators",
        example="console",
        default_value="console",
        warn_on_default=False,
    ),

    "DEBUG_LOGGING": EnvVarRule(
        pattern=_BOOLEAN,
        pattern_description="Boolean value (true/false)",
        required=False,
        fix_suggestion="Set to 'true' to log SQL and per-attempt detail",
        example="false",
        default_value="false",
        warn_on_default=False,
    ),
}


# ============================================================================
# VALIDATION FUNCTIONS
# ============================================================================

def validate_single_var(
    var_name: str,
    rule: EnvVarRule,
    include_warnings: bool = True
) -> Optional[ValidationError]:
    """
    Validate a single environment variable against its rule.

    Args:
        var_name: Environment variable name
        rule: Validation rule to apply
        include_warnings: Whether to return warnings for vars using defaults

    Returns:
        ValidationError if validation fails or warning if using default, None if passes
    """
    value = os.environ.get(var_name)

    if rule.required and (value is None or (not rule.allow_empty and value == "")):
        return ValidationError(
            var_name=var_name,
            message="Required environment variable not set",
            current_value=value,
            expected_pattern=rule.pattern_description,
            fix_suggestion=f"{rule.fix_suggestion}. Example: {rule.example}",
            severity="error",
        )

    if value is None or value == "":
        if include_warnings and not rule.required and rule.warn_on_default and rule.default_value is not None:
            return ValidationError(
                var_name=var_name,
                message="Not set, using default value",
                current_value=None,
                expected_pattern=f"Default: {rule.default_value}",
                fix_suggestion=f"Set explicitly or accept default. {rule.fix_suggestion}",
                severity="warning",
            )
        return None

    if not rule.pattern.match(value):
        return ValidationError(
            var_name=var_name,
            message="Invalid format",
            current_value=value,
            expected_pattern=rule.pattern_description,
            fix_suggestion=f"{rule.fix_suggestion}. Example: {rule.example}",
            severity="error",
        )

    return None


def validate_endpoint_source() -> Optional[ValidationError]:
    """The node address must come from DB_HOST or from the provisioning output."""
    if os.environ.get("DB_HOST") or os.environ.get("PROVISIONING_OUTPUT"):
        return None
    return ValidationError(
        var_name="DB_HOST",
        message="No endpoint address: neither DB_HOST nor PROVISIONING_OUTPUT is set",
        current_value=None,
        expected_pattern=ENV_VAR_RULES["DB_HOST"].pattern_description,
        fix_suggestion=f"{ENV_VAR_RULES['DB_HOST'].fix_suggestion}. Example: {ENV_VAR_RULES['DB_HOST'].example}",
        severity="error",
    )


def validate_environment(
    rules: Optional[Dict[str, EnvVarRule]] = None,
    include_warnings: bool = True
) -> List[ValidationError]:
    """
    Validate all environment variables against their rules.

    Args:
        rules: Optional custom rules dict (defaults to ENV_VAR_RULES)
        include_warnings: Whether to include warnings for vars using defaults

    Returns:
        List of ValidationError objects (errors and optionally warnings)
    """
    use_default_rules = rules is None
    if rules is None:
        rules = ENV_VAR_RULES

    results = []
    for var_name, rule in rules.items():
        result = validate_single_var(var_name, rule, include_warnings=include_warnings)
        if result:
            results.append(result)

    if use_default_rules:
        source_error = validate_endpoint_source()
        if source_error:
            results.append(source_error)

    return results


def get_validation_summary(include_warnings: bool = True) -> Dict[str, Any]:
    """
    Get a summary of environment variable validation status.

    Returns:
        Dict with validation summary suitable for --validate-only output
    """
    all_results = validate_environment(include_warnings=include_warnings)

    errors = [r for r in all_results if r.severity == "error"]
    warnings = [r for r in all_results if r.severity == "warning"]

    required_vars = [name for name, rule in ENV_VAR_RULES.items() if rule.required]
    optional_vars = [name for name, rule in ENV_VAR_RULES.items() if not rule.required]

    missing_required = [name for name in required_vars if not os.environ.get(name)]
    set_optional = [name for name in optional_vars if os.environ.get(name)]

    return {
        "valid": len(errors) == 0,
        "error_count": len(errors),
        "warning_count": len(warnings),
        "required_vars": {
            "total": len(required_vars),
            "set": len(required_vars) - len(missing_required),
            "missing": missing_required,
        },
        "optional_vars": {
            "total": len(optional_vars),
            "set": len(set_optional),
            "using_defaults": len(optional_vars) - len(set_optional),
        },
        "errors": [e.to_dict() for e in errors],
        "warnings": [w.to_dict() for w in warnings],
    }


def log_validation_results(logger=None) -> bool:
    """
    Log validation results at appropriate levels.

    Logs errors at ERROR level, warnings at WARNING level.
    Returns True if no errors (warnings are OK).

    Args:
        logger: Optional logger instance (uses print if None)

    Returns:
        True if no errors, False if there are errors
    """
    all_results = validate_environment(include_warnings=True)

    errors = [r for r in all_results if r.severity == "error"]
    warnings = [r for r in all_results if r.severity == "warning"]

    def _log(level: str, msg: str):
        if logger:
            getattr(logger, level.lower())(msg)
        else:
            print(f"[{level.upper()}] {msg}")

    for error in errors:
        _log("error", f"ENV VAR ERROR: {error.var_name} - {error.message}")
        _log("error", f"  Expected: {error.expected_pattern}")
        _log("error", f"  Fix: {error.fix_suggestion}")

    if warnings:
        _log("warning", f"ENV VARS: {len(warnings)} optional variables using defaults:")
        for warning in warnings:
            default_val = warning.expected_pattern.replace("Default: ", "")
            _log("warning", f"  {warning.var_name} → {default_val}")

    if errors:
        _log("error", f"❌ VALIDATION_FAILED: {len(errors)} environment variable errors")
        return False
    elif warnings:
        _log("info", f"✅ Environment validation passed ({len(warnings)} vars using defaults)")
        return True
    else:
        _log("info", "✅ Environment validation passed (all vars explicitly set)")
        return True


__all__ = [
    "ENV_VAR_RULES",
    "EnvVarRule",
    "ValidationError",
    "validate_environment",
    "validate_endpoint_source",
    "validate_single_var",
    "get_validation_summary",
    "log_validation_results",
]
