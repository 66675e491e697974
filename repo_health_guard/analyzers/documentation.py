"""Documentation quality analysis for README-style markdown files."""

import re
from typing import NamedTuple

from repo_health_guard.analyzers.base import clamp, round_half_up
from repo_health_guard.models import RepositoryFile

HEADING_PATTERN = re.compile(r"^#{1,6}\s.+", re.MULTILINE)
CODE_BLOCK_PATTERN = re.compile(r"```[\s\S]*?```")
IMAGE_PATTERN = re.compile(r"!\[[^\]\n]*\]\([^)\n]+\)")
LINK_PATTERN = re.compile(r"\[[^\]\n]+\]\([^)\n]+\)")
SENTENCE_SPLIT_PATTERN = re.compile(r"[.!?]+")

DOCUMENT_EXTENSIONS = (".md", ".markdown", ".rst", ".txt", ".adoc")

OPTIMAL_SENTENCE_LENGTH = 15

# Ideal documentation length, in words
MIN_IDEAL_WORDS = 200
MAX_IDEAL_WORDS = 2000

FILE_SCORE_WEIGHTS = {
    "word_count": 0.3,
    "structure": 0.3,
    "readability": 0.4,
}


class DocumentationAnalysis(NamedTuple):
    word_count: int
    has_headings: bool
    has_code_blocks: bool
    has_links: bool
    has_images: bool
    readability_score: int


class DocumentationMetrics(NamedTuple):
    readme_score: int
    adr_score: int
    inline_doc_score: int
    contributing_guide_exists: bool
    license_exists: bool
    files_analyzed: int = 0


EMPTY_ANALYSIS = DocumentationAnalysis(0, False, False, False, False, 0)


def analyze_document(content: str) -> DocumentationAnalysis:
    """
    Extract structure and readability signals from a markdown document.

    Code blocks, images and links are removed before counting words so URLs
    and code do not inflate the count. Readability peaks at an average of
    15 words per sentence and drops 5 points per word of deviation.
    """
    content = content or ""

    has_headings = bool(HEADING_PATTERN.search(content))
    has_code_blocks = bool(CODE_BLOCK_PATTERN.search(content))
    has_links = bool(LINK_PATTERN.search(content))
    has_images = bool(IMAGE_PATTERN.search(content))

    clean_content = CODE_BLOCK_PATTERN.sub("", content)
    clean_content = IMAGE_PATTERN.sub("", clean_content)
    clean_content = LINK_PATTERN.sub("", clean_content)

    word_count = len(clean_content.split())
    if word_count == 0:
        return EMPTY_ANALYSIS

    sentences = [
        sentence
        for sentence in SENTENCE_SPLIT_PATTERN.split(clean_content)
        if sentence.strip()
    ]
    avg_words_per_sentence = word_count / len(sentences) if sentences else 0
    readability = clamp(
        100 - abs(avg_words_per_sentence - OPTIMAL_SENTENCE_LENGTH) * 5
    )

    return DocumentationAnalysis(
        word_count=word_count,
        has_headings=has_headings,
        has_code_blocks=has_code_blocks,
        has_links=has_links,
        has_images=has_images,
        readability_score=round_half_up(readability),
    )


def word_count_score(word_count: int) -> float:
    """
    Score document length on a 0-100 scale.

    - 0 words: 0
    - under 200 words: linear ramp up to 80
    - 200-2000 words: 100
    - over 2000 words: minus 15 points per extra 1000 words, floored at 0
    """
    if word_count <= 0:
        return 0.0
    if word_count < MIN_IDEAL_WORDS:
        return (word_count / MIN_IDEAL_WORDS) * 80
    if word_count <= MAX_IDEAL_WORDS:
        return 100.0
    excess = (word_count - MAX_IDEAL_WORDS) / 1000
    return max(0.0, 100 - excess * 15)


def structure_score(analysis: DocumentationAnalysis) -> int:
    features = [
        analysis.has_headings,
        analysis.has_code_blocks,
        analysis.has_links,
        analysis.has_images,
    ]
    return sum(features) * 25


def calculate_file_score(analysis: DocumentationAnalysis) -> int:
    """Combine length, structure and readability into a 0-100 file score."""
    score = (
        word_count_score(analysis.word_count) * FILE_SCORE_WEIGHTS["word_count"]
        + structure_score(analysis) * FILE_SCORE_WEIGHTS["structure"]
        + clamp(analysis.readability_score) * FILE_SCORE_WEIGHTS["readability"]
    )
    return round_half_up(clamp(score))


def classify_documentation_path(path: str) -> str | None:
    """
    Map a repository path to a documentation role.

    Returns "readme", "adr", "contributing", "license" or None.
    """
    lower = path.lower()
    name = lower.rsplit("/", 1)[-1]
    if name.startswith("readme"):
        return "readme"
    if name.startswith("contributing"):
        return "contributing"
    if name.startswith("license") or name.startswith("licence") or name.startswith(
        "copying"
    ):
        return "license"
    if ("adr" in lower or "architecture" in lower) and lower.endswith(
        DOCUMENT_EXTENSIONS
    ):
        return "adr"
    return None


def is_documentation_path(path: str) -> bool:
    return classify_documentation_path(path) is not None


def analyze_documentation_files(files: list[RepositoryFile]) -> DocumentationMetrics:
    """
    Build documentation metrics from candidate documentation files.

    The shallowest README wins; ADR/architecture documents contribute their
    best file score. Inline documentation is not measured and stays 0.
    """
    readme_score = 0
    readme_depth: int | None = None
    adr_score = 0
    contributing_exists = False
    license_exists = False
    analyzed = 0

    for file in files:
        role = classify_documentation_path(file.path)
        if role is None:
            continue
        analyzed += 1

        if role == "contributing":
            contributing_exists = True
        elif role == "license":
            license_exists = True
        elif role == "readme":
            depth = file.path.count("/")
            if readme_depth is None or depth < readme_depth:
                readme_depth = depth
                readme_score = calculate_file_score(analyze_document(file.content))
        elif role == "adr":
            adr_score = max(
                adr_score, calculate_file_score(analyze_document(file.content))
            )

    return DocumentationMetrics(
        readme_score=readme_score,
        adr_score=adr_score,
        inline_doc_score=0,
        contributing_guide_exists=contributing_exists,
        license_exists=license_exists,
        files_analyzed=analyzed,
    )
