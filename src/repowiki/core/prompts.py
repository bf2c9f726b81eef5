"""Prompt generation for wiki generation and updates."""

from ..config import RepowikiConfig

WIKI_RULES = """## Formatting Rules

- Each wiki page starts with an H1 title
- Include a `<cite>` block listing all source files referenced
- Include a Table of Contents after the cite block
- Use mermaid diagrams for architecture documentation
- Reference code with `file://path/to/file` format in cite blocks

## Constraints

- Do NOT modify any source code files
- Only create or modify files within `{wiki_path}/`
- Write pages in language: {language}
"""

FULL_PROMPT_TEMPLATE = """You are a technical documentation specialist. Generate a complete
repository wiki for this codebase from scratch.

## Instructions

1. Explore the repository structure and read the main source files
2. Identify the major components, modules and their responsibilities
3. Write one wiki page per major component under `{content_dir}/`
4. Add an overview page describing the architecture and how components interact
5. Record the source files each page references in `{meta_file}`

{rules}"""

INCREMENTAL_PROMPT_TEMPLATE = """You are a technical documentation specialist. Update the existing
repository wiki in `{wiki_path}/` to reflect recent code changes.

## Changed Files

{changed_files}

## Affected Sections

{sections}

## Instructions

1. Read the changed source files to understand what was modified
2. Read the existing wiki pages in `{content_dir}/` for the affected sections
3. Update any wiki pages that reference or document the changed code
4. If new modules or features have no wiki coverage, create new pages
5. Remove or rewrite content describing code that was deleted
6. Update `{meta_file}` with new code references

{rules}"""


def _paths(config: RepowikiConfig) -> dict[str, str]:
    wiki_path = config.wiki.path.rstrip("/")
    language = config.wiki.language
    return {
        "wiki_path": wiki_path,
        "content_dir": f"{wiki_path}/{language}/content",
        "meta_file": f"{wiki_path}/{language}/meta/repowiki-metadata.json",
        "rules": WIKI_RULES.format(wiki_path=wiki_path, language=language),
    }


def _bullets(items: list[str] | tuple[str, ...]) -> str:
    return "\n".join(f"- {item}" for item in items) or "- (none)"


def build_full_prompt(config: RepowikiConfig) -> str:
    """Generate prompt for a full wiki generation.

    Args:
        config: Repowiki configuration

    Returns:
        Formatted prompt for the engine
    """
    return FULL_PROMPT_TEMPLATE.format(**_paths(config))


def build_incremental_prompt(
    config: RepowikiConfig,
    changed_files: list[str] | tuple[str, ...],
    sections: list[str] | tuple[str, ...],
) -> str:
    """Generate prompt for an incremental wiki update.

    Args:
        config: Repowiki configuration
        changed_files: Changed paths left after exclusions
        sections: Affected wiki sections

    Returns:
        Formatted prompt for the engine
    """
    return INCREMENTAL_PROMPT_TEMPLATE.format(
        changed_files=_bullets(changed_files),
        sections=_bullets(sections),
        **_paths(config),
    )


SLASH_COMMAND_TEMPLATE = """---
description: Update the repository wiki documentation based on recent code changes
---

You are a technical documentation specialist. Update the repository wiki in `{wiki_path}/`
to reflect the current state of the codebase.

## Instructions

1. Run `git diff --name-only HEAD~5 HEAD` to see recently changed files
2. Read the changed source files to understand what was modified
3. Read the existing wiki pages in `{content_dir}/`
4. Update any wiki pages that reference or document the changed code
5. If new modules or features have no wiki coverage, create new pages
6. Update `{meta_file}` with new code references

{rules}"""


def build_slash_command(config: RepowikiConfig) -> str:
    """Markdown for the interactive ``/update-wiki`` Qoder command."""
    return SLASH_COMMAND_TEMPLATE.format(**_paths(config))
