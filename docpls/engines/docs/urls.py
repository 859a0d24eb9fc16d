"""URL normalisation and offline documentation-candidate construction."""

from __future__ import annotations

import re
from dataclasses import dataclass

from docpls.models import Ecosystem

NPM_PACKAGE_PAGE = "https://www.npmjs.com/package/{name}"
PYPI_PROJECT_PAGE = "https://pypi.org/project/{name}"

_SHORTHAND_HOSTS = {
    "github": "github.com",
    "gitlab": "gitlab.com",
    "bitbucket": "bitbucket.org",
}
_SHORTHAND_RE = re.compile(r"^(github|gitlab|bitbucket):([\w.-]+/[\w.-]+)$")
_BARE_REPO_RE = re.compile(r"^[\w.-]+/[\w.-]+$")
_SCP_RE = re.compile(r"^(?:[\w.-]+@)?([\w.-]+):(?!//)(.+)$")


def normalize_url(url: str) -> str:
    """Turn repository-ish strings into a browsable https URL.

    >>> normalize_url("git+https://github.com/org/repo.git")
    'https://github.com/org/repo'
    >>> normalize_url("git@github.com:org/repo.git")
    'https://github.com/org/repo'
    >>> normalize_url("github:org/repo")
    'https://github.com/org/repo'
    """
    url = url.strip()
    if not url:
        return url

    m = _SHORTHAND_RE.match(url)
    if m:
        return f"https://{_SHORTHAND_HOSTS[m.group(1)]}/{m.group(2)}"
    if _BARE_REPO_RE.match(url) and "." not in url.split("/", 1)[0]:
        return f"https://github.com/{url}"

    if url.startswith("git+"):
        url = url[len("git+"):]
    if url.startswith("git://"):
        url = "https://" + url[len("git://"):]
    elif url.startswith("ssh://"):
        url = "https://" + url[len("ssh://"):].split("@", 1)[-1]
    elif "://" not in url:
        scp = _SCP_RE.match(url)
        if scp:
            url = f"https://{scp.group(1)}/{scp.group(2)}"

    url = url.rstrip("/")
    if url.endswith(".git"):
        url = url[: -len(".git")]
    return url


def repository_candidates(repo_url: str) -> list[str]:
    """README / wiki locations for well-known hosting providers."""
    if "github.com" in repo_url:
        return [
            f"{repo_url}#readme",
            f"{repo_url}/blob/main/README.md",
            f"{repo_url}/blob/master/README.md",
            f"{repo_url}/wiki",
        ]
    if "gitlab.com" in repo_url:
        return [
            f"{repo_url}/-/blob/main/README.md",
            f"{repo_url}/-/blob/master/README.md",
            f"{repo_url}/-/wikis",
        ]
    return [repo_url]


def fallback_url(name: str, ecosystem: Ecosystem) -> str:
    if ecosystem is Ecosystem.PYTHON:
        return PYPI_PROJECT_PAGE.format(name=name)
    return NPM_PACKAGE_PAGE.format(name=name)


@dataclass
class PackageMetadata:
    """The subset of a package's metadata that can point at documentation."""

    name: str
    ecosystem: Ecosystem = Ecosystem.NODE
    documentation: str | None = None
    homepage: str | None = None
    repository: str | None = None


def candidate_urls(metadata: PackageMetadata, registry_url: str | None = None) -> list[str]:
    """Ordered, de-duplicated documentation candidates for *metadata*.

    Order: documentation field, homepage, repository-derived locations,
    *registry_url* when given, then the package-index fallback page.
    """
    urls: list[str] = []
    if metadata.documentation:
        urls.append(normalize_url(metadata.documentation))
    if metadata.homepage:
        urls.append(normalize_url(metadata.homepage))
    if metadata.repository:
        urls.extend(repository_candidates(normalize_url(metadata.repository)))
    if registry_url:
        urls.append(normalize_url(registry_url))
    urls.append(fallback_url(metadata.name, metadata.ecosystem))

    unique: list[str] = []
    for url in urls:
        if url and url not in unique:
            unique.append(url)
    return unique
