"""Application-wide constants.

This module centralizes values shared across modules. For
environment-specific configuration, see config.py.
"""

# =============================================================================
# Roles
# =============================================================================

ROLE_ADMIN: str = "admin"
ROLE_INSTRUCTOR: str = "instructor"
ROLE_STUDENT: str = "student"

# Landing path per role, returned after login
ROLE_HOME_PATHS: dict[str, str] = {
    ROLE_ADMIN: "/admin",
    ROLE_INSTRUCTOR: "/instructor",
    ROLE_STUDENT: "/student",
}

# =============================================================================
# Catalog
# =============================================================================

COURSE_CYCLES: tuple[int, ...] = (1, 2)

# Palette used when a course is created without a color
COURSE_COLORS: tuple[str, ...] = (
    "#3B82F6",
    "#8B5CF6",
    "#10B981",
    "#F59E0B",
    "#EF4444",
    "#06B6D4",
    "#F97316",
    "#EC4899",
)

# =============================================================================
# Users
# =============================================================================

MIN_PASSWORD_LENGTH: int = 6

# =============================================================================
# Pagination Defaults
# =============================================================================

DEFAULT_PAGE_SIZE: int = 20
MAX_PAGE_SIZE: int = 100

# =============================================================================
# Video uploads
# =============================================================================

VIDEO_MIME_PREFIX: str = "video/"
