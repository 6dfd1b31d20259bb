"""Tag literals, prompts and defaults shared across the pipeline.

The tag literals are part of the response format the models are asked to
produce; changing them breaks parsing of real model output.
"""

# Analysis response tags
FILE_PATH_TAG = "<<<FILE_PATH>>>"
FIX_START_TAG = "<<<FIX_START>>>"
FIX_END_TAG = "<<<FIX_END>>>"

# Apply round-trip sentinels
UPDATED_CODE_START_TAG = "<updated-code>"
UPDATED_CODE_END_TAG = "</updated-code>"
ORIGINAL_FILE_START_TAG = "<<<ORIGINAL_FILE_START>>>"
ORIGINAL_FILE_END_TAG = "<<<ORIGINAL_FILE_END>>>"

DEFAULT_PROMPT = "\n".join([
    "You are a senior software engineer helping debug test failures. Analyze:",
    "1. Test output",
    "2. Repository structure",
    "3. Code changes (git diff)",
    "4. Relevant test files",
    "Provide concise, actionable solutions.",
])

DEFAULT_FIX_PROMPT = "\n".join([
    "Propose concrete code changes that make the failing tests pass.",
    "Prefer fixing the source code over changing the tests, unless the test itself is wrong.",
    "Only include files that actually need to change.",
])

FIX_FILE_FORMAT_INSTRUCTION = "\n".join([
    "For every file you change, use exactly this format:",
    f"{FILE_PATH_TAG}path/relative/to/repository/root",
    FIX_START_TAG,
    "<the changed code, with enough surrounding lines to locate it>",
    FIX_END_TAG,
    "Put each tag on its own line. Paths must be relative to the repository root.",
    "Text outside of these blocks is treated as commentary and ignored.",
])

APPLY_CHANGES_INSTRUCTION = "\n".join([
    "Apply the change above to the original file.",
    "Replace only the region the change affects and keep every other line exactly as it is,",
    "including formatting, comments and blank lines.",
    "If the change introduces a new file, the original file is empty: output the whole new file.",
    f"Return the complete updated file between {UPDATED_CODE_START_TAG} and {UPDATED_CODE_END_TAG}",
    "and nothing else.",
])

APPLY_SYSTEM_PROMPT = (
    "You are a senior engineer fixing code issues. Provide ONLY the corrected "
    f"file content wrapped in {UPDATED_CODE_START_TAG} tags. "
    "Preserve formatting and comments."
)

DEFAULT_TEST_FILE_PATTERN = [
    "**/*.{test,spec}.*",
    "**/*.{tests,specs}.*",
    "**/test_*.py",
    "**/__tests__/**/*",
    "**/__test__/**/*",
    "**/test/**/*",
    "**/tests/**/*",
]

DEFAULT_SOURCE_FILE_PATTERN = ["**/*"] + [f"!{pattern}" for pattern in DEFAULT_TEST_FILE_PATTERN]

DEFAULT_SERIALIZE_COMMAND = "yek"
DEFAULT_TIMEOUT_SECONDS = 120
MAX_FILES_TO_FIX = 50

CACHE_RELATIVE_PATH = ".cache/fixloop/cache.json"
