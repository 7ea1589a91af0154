"""Annotation tables that drive route extraction.

Adding a controller marker or a mapping annotation is a data change here,
not a new branch in the scanner.
"""

_WEB_BIND = "org.springframework.web.bind.annotation"

REQUEST_MAPPING = f"{_WEB_BIND}.RequestMapping"

# Type-level markers for controller-like types
CONTROLLER_ANNOTATIONS: tuple[str, ...] = (
    "org.springframework.stereotype.Controller",
    f"{_WEB_BIND}.RestController",
)

# Member-level mapping annotation -> default HTTP verbs
MAPPING_ANNOTATIONS: dict[str, tuple[str, ...]] = {
    REQUEST_MAPPING: ("GET", "POST", "PUT", "DELETE"),
    f"{_WEB_BIND}.GetMapping": ("GET",),
    f"{_WEB_BIND}.PostMapping": ("POST",),
    f"{_WEB_BIND}.PutMapping": ("PUT",),
    f"{_WEB_BIND}.DeleteMapping": ("DELETE",),
    f"{_WEB_BIND}.PatchMapping": ("PATCH",),
}

# Annotations whose `method` attribute may narrow the verb set
EXPLICIT_VERB_ANNOTATIONS = frozenset({REQUEST_MAPPING})

HTTP_METHODS: tuple[str, ...] = ("GET", "POST", "PUT", "DELETE", "PATCH")
