"""
Prompt builders for requesting edits and new files from the model.
"""

from .editing.phrases import LanguageProfile, get_language_profile

SYSTEM_PROMPT = (
    "You are a careful coding assistant. When asked for a diff you answer "
    "with a unified diff only. When asked for a file you answer with the "
    "complete file only."
)


def build_edit_prompt(file_path: str, content: str, edit_request: str,
                      profile: LanguageProfile | None = None) -> str:
    """Ask for a unified diff that makes *edit_request* to *file_path*."""
    profile = profile or get_language_profile(None)
    return f"""TASK: Edit the {profile.label} file "{file_path}" by making the requested change.

CURRENT FILE CONTENT:
{content}

CHANGE REQUESTED: {edit_request}

REQUIREMENTS:
- You must return ONLY a unified diff
- Do NOT write any explanations
- Do NOT write any other language
- Return ONLY the diff format shown below

EXAMPLE FORMAT (replace with actual changes):
--- {file_path}
+++ {file_path}
@@ -7,1 +7,2 @@
 func main() {{
 	cmd.RootCmd()
+	// HEllo world
 }}

RESPOND WITH ONLY THE DIFF - NO OTHER TEXT:"""


def build_generate_prompt(file_path: str, requirements: str,
                          profile: LanguageProfile | None = None) -> str:
    """Ask for a complete new file at *file_path*."""
    profile = profile or get_language_profile(None)
    keyword = profile.declaration_keywords[0].strip()
    return (
        f"Please generate a new {profile.label} file with the following requirements:\n\n"
        f"File path: {file_path}\n"
        f"Requirements: {requirements}\n\n"
        f"Please provide the complete file content with proper {profile.label} "
        f"{keyword} declaration, imports, and implementation. Format it as a "
        f"complete, runnable {profile.label} file."
    )
