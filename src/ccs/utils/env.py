# Environment variable helpers for provider credentials
import os
import re
import warnings
from collections.abc import Mapping

# ABOUTME: Pattern matches ${VAR_NAME} where VAR_NAME is uppercase with underscores
ENV_VAR_PATTERN = re.compile(r'\$\{([A-Z_][A-Z0-9_]*)\}')


def expand_env_vars(value: str, environ: Mapping[str, str] | None = None) -> str:
    """Expand environment variables in ${VAR} format.

    ABOUTME: Lets provider env values reference secrets kept in the shell
    ABOUTME: Returns original reference if variable not found (with warning)

    Args:
        value: String potentially containing ${VAR} references
        environ: Variables to resolve from (default: os.environ)

    Returns:
        String with environment variables expanded

    Examples:
        >>> expand_env_vars("${GLM_API_KEY}")
        'sk-...'
        >>> expand_env_vars("Bearer ${UNSET_VAR}")
        'Bearer ${UNSET_VAR}'  # with warning
    """
    source = os.environ if environ is None else environ

    def replace_var(match: re.Match[str]) -> str:
        var_name = match.group(1)
        if var_name in source:
            return source[var_name]
        warnings.warn(
            f"Environment variable '{var_name}' not found, keeping original",
            UserWarning,
            stacklevel=2
        )
        return match.group(0)

    return ENV_VAR_PATTERN.sub(replace_var, value)


def referenced_env_vars(value: str) -> list[str]:
    """Names of all ${VAR} references in `value`, in order."""
    return [match.group(1) for match in ENV_VAR_PATTERN.finditer(value)]
