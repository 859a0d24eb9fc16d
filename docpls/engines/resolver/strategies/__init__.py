"""Format strategies — auto-registered on import."""

from docpls.engines.resolver.strategies import (
    conda_environment,  # noqa: F401
    node_modules,  # noqa: F401
    package_json,  # noqa: F401
    package_lock,  # noqa: F401
    pipfile,  # noqa: F401
    pipfile_lock,  # noqa: F401
    pnpm_lock,  # noqa: F401
    poetry_lock,  # noqa: F401
    pyproject_toml,  # noqa: F401
    requirements_txt,  # noqa: F401
    setup_cfg,  # noqa: F401
    site_packages,  # noqa: F401
    uv_lock,  # noqa: F401
    yarn_lock,  # noqa: F401
)
