#!/usr/bin/env python3
"""
Vibe Shield Cursor Integration
Creates (or appends to) .cursorrules so the agent runs a scan before finishing a task
"""

from dataclasses import dataclass
from pathlib import Path

CURSORRULES_FILENAME = ".cursorrules"

# Either marker means our block is already present
RULES_MARKERS = ("vibeshield", "Vibe Shield")

CURSORRULES_CONTENT = """# Vibe Shield Security Rules

Before marking a task as done, run `vibeshield scan`. If issues are found, follow the [INSTRUCTION] provided in the output to fix them.

## Security Checklist
- [ ] No hardcoded secrets (API keys, passwords, tokens)
- [ ] No dangerous code execution (eval, shell injection)
- [ ] No SQL injection vulnerabilities (use parameterized queries)
- [ ] All secrets stored in environment variables
- [ ] HTTPS used for all external URLs
"""


@dataclass
class InitResult:
    """Outcome of writing the agent rules file"""
    success: bool
    message: str
    path: Path


def init_cursor_rules(project_root: Path) -> InitResult:
    """
    Add the Vibe Shield block to .cursorrules in project_root.

    Creates the file if missing, appends to it if it exists without our
    block, and refuses (success=False) if the block is already there.

    Args:
        project_root: Project directory

    Returns:
        InitResult describing what happened
    """
    rules_path = Path(project_root) / CURSORRULES_FILENAME

    if rules_path.exists():
        try:
            existing = rules_path.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            return InitResult(False, f"Failed to read {CURSORRULES_FILENAME}: {e}", rules_path)

        if any(marker in existing for marker in RULES_MARKERS):
            return InitResult(
                False,
                f"Vibe Shield rules already exist in {CURSORRULES_FILENAME}",
                rules_path,
            )

        try:
            rules_path.write_text(existing + "\n\n" + CURSORRULES_CONTENT, encoding='utf-8')
        except OSError as e:
            return InitResult(False, f"Failed to update {CURSORRULES_FILENAME}: {e}", rules_path)

        return InitResult(
            True,
            f"Vibe Shield rules appended to existing {CURSORRULES_FILENAME}",
            rules_path,
        )

    try:
        rules_path.write_text(CURSORRULES_CONTENT, encoding='utf-8')
    except OSError as e:
        return InitResult(False, f"Failed to create {CURSORRULES_FILENAME}: {e}", rules_path)

    return InitResult(True, f"{CURSORRULES_FILENAME} created successfully!", rules_path)
