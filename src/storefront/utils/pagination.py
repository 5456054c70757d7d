"""Page/offset arithmetic shared by the read-side queries."""

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain


def page_size(per_page=None):
    """Clamp ``per_page`` to ``[1, MAX_PAGE_SIZE]``, defaulting from config."""
    custom = current_domain.config["custom"]
    size = per_page or custom["DEFAULT_PAGE_SIZE"]
    return max(1, min(int(size), custom["MAX_PAGE_SIZE"]))


def paginate(queryset, page=1, per_page=None):
    """Apply 1-indexed ``page`` to ``queryset`` and return the ``ResultSet``."""
    if page < 1:
        raise ValidationError({"page": ["Page numbers start at 1"]})
    size = page_size(per_page)
    return queryset.offset((page - 1) * size).limit(size).all()
