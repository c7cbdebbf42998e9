# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Prompt builders for annotation, section analysis and repository summaries."""

from collections.abc import Sequence

from rca.coverage import quintile_bounds

_SECTION_NAMES: tuple[str, ...] = ("File Start", "Early", "Middle", "Late", "File End")


def build_annotation_prompt(file_name: str, content: str, line_count: int) -> str:
    """Build the prompt asking for annotations spread over five file sections.

    Args:
        file_name: Display name of the file.
        content: File content sent to the model.
        line_count: Line count of ``content``.

    Returns:
        Prompt text.
    """
    section_lines = []
    for quintile in quintile_bounds(line_count):
        name = _SECTION_NAMES[quintile.index]
        section_lines.append(
            f"   SECTION {quintile.index + 1} ({name}): "
            f"Lines {quintile.start_line} to {max(quintile.start_line, quintile.end_line)}"
        )
    sections = "\n".join(section_lines)
    final_from = max(1, (line_count * 85) // 100)
    return f"""You are an expert code analyzer. Analyze this {line_count}-line file and create 20-25 high-quality annotations that cover the ENTIRE file from start to finish.

CRITICAL REQUIREMENTS:
1. You MUST analyze ALL {line_count} lines
2. Create at least 4 annotations in EACH of these sections:

{sections}

3. Your FINAL annotation must be within lines {final_from} to {line_count}
4. Ensure complete file coverage

File: {file_name}
Total Lines: {line_count}

```
{content}
```

OUTPUT FORMAT:
Return ONLY a valid JSON array. No markdown, no explanations, just the JSON array:

[
  {{"lineStart": 1, "lineEnd": 5, "annotation": "Brief meaningful description", "type": "info"}},
  {{"lineStart": 10, "lineEnd": 15, "annotation": "Another annotation", "type": "function"}}
]

ANNOTATION TYPES (choose appropriately):
- "info": General information, explanations
- "function": Function definitions and implementations
- "class": Class definitions and structures
- "important": Critical logic, key algorithms
- "warning": Potential issues, edge cases, security concerns

Generate the annotations now:"""


def build_section_prompt(
    code: str,
    line_start: int,
    line_end: int,
    file_name: str | None = None,
    question: str | None = None,
) -> str:
    """Build a detailed-analysis or question prompt for one code section.

    Args:
        code: Source text of the section.
        line_start: First line of the section in its file.
        line_end: Last line of the section in its file.
        file_name: Display name of the file.
        question: User question; switches the prompt to Q&A mode.

    Returns:
        Prompt text.
    """
    line_count = code.count("\n") + 1
    header = (
        f"File: {file_name or 'unknown'}\n"
        f"Lines: {line_start}-{line_end} ({line_count} lines total)\n\n"
        f"Code:\n```\n{code}\n```"
    )
    if question:
        return (
            "You are an expert code analyzer. Answer the following question about "
            f"this code section.\n\n{header}\n\nQuestion: {question}\n\n"
            "Provide a clear, concise answer focusing specifically on the question "
            "asked. Include relevant code references and line numbers when helpful."
        )
    return (
        "You are an expert code analyzer. Provide a comprehensive analysis of this "
        f"code section.\n\n{header}\n\n"
        "Provide a detailed analysis covering:\n"
        "1. Purpose: What this code does\n"
        "2. Key Components: Main functions, classes, or logic\n"
        "3. Dependencies: External libraries or modules used\n"
        "4. Potential Issues: Bugs, security concerns, or improvements\n"
        "5. Best Practices: Any recommendations\n\n"
        "Be specific and reference actual code elements."
    )


def build_summary_prompt(
    full_name: str,
    description: str | None,
    stars: int,
    file_paths: Sequence[str],
    top_languages: Sequence[tuple[str, float]],
) -> str:
    """Build the plain-text repository summary prompt.

    Args:
        full_name: ``owner/repo`` identifier.
        description: Repository description.
        stars: Stargazer count.
        file_paths: Analyzable file paths; the first ten are listed.
        top_languages: ``(language, percentage)`` pairs, largest first.

    Returns:
        Prompt text.
    """
    languages = ", ".join(f"{name} ({percentage:.1f}%)" for name, percentage in top_languages[:3])
    key_files = "\n".join(f"- {path}" for path in file_paths[:10])
    return (
        "Summarize this GitHub repository concisely in plain text. Do NOT use any "
        "markdown formatting (no **, no `, no #). Just write normal sentences.\n\n"
        f"Repository: {full_name}\n"
        f"Description: {description or 'No description'}\n"
        f"Stars: {stars}\n"
        f"Files: {len(file_paths)}\n\n"
        f"Top Languages: {languages}\n\n"
        f"Key Files:\n{key_files}\n\n"
        "Provide a concise summary covering: purpose, tech stack, key features, and "
        "architecture. Write in plain text only, no markdown, no word count."
    )
