"""Constants shared by the document model and its host-facing API."""

class DocumentConstants:
    """Central constants for the document model."""

    # JSON node types
    DOC_TYPE = "doc"
    TEXT_TYPE = "text"
    DEFAULT_BLOCK_KIND = "paragraph"
    PROJECT_CHIP_KIND = "projectChip"

    # Text extraction
    BLOCK_SEPARATOR = "\n"  # Between the text of two blocks in extracted text
    LABEL_PREFIX = "#"  # Marks a reference chip label
    PLACEHOLDER_LABEL = "#Project"  # Label when a reference cannot be resolved

    # Host editor positions are 1-based; the core is 0-based
    EDITOR_POSITION_BASE = 1

    # Mark comparison for adjacent text runs (False = compare as sets)
    ORDERED_MARKS = False

    # Attribute names that carry the referenced entity id, in lookup order
    REFERENCE_ATTRS = ("projectId", "id", "ref")
    FALLBACK_NAME_ATTR = "projectName"

    # Mark types understood by the formatting helpers
    BOLD = "bold"
    UNDERLINE = "underline"
    LINK = "link"
