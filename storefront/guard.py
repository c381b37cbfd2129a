"""
View gating: the route guard, the storefront's route table, and the rule that
prices are only shown to logged-in visitors.
"""

import re
from typing import NamedTuple, Optional, Tuple

LOGIN_PATH = "/login"
HOME_PATH = "/"
PRICE_HIDDEN = "Log in to view price"


class GuardDecision(NamedTuple):
    kind: str  # "loading" | "redirect" | "render"
    to: Optional[str] = None
    from_path: Optional[str] = None

    @property
    def renders(self) -> bool:
        return self.kind == "render"


def guard(is_authenticated: bool, is_admin: bool, is_loading: bool,
          path: str, require_admin: bool = False) -> GuardDecision:
    """Decide what a protected view shows. Re-evaluated on every navigation."""
    if is_loading:
        return GuardDecision("loading")
    if not is_authenticated:
        return GuardDecision("redirect", to=LOGIN_PATH, from_path=path)
    if require_admin and not is_admin:
        return GuardDecision("redirect", to=HOME_PATH)
    return GuardDecision("render")


# (pattern, protected, admin only)
ROUTES: Tuple[Tuple[str, bool, bool], ...] = (
    ("/login", False, False),
    ("/register", False, False),
    ("/", False, False),
    ("/products", False, False),
    ("/products/:id", False, False),
    ("/cart", False, False),
    ("/contact", False, False),
    ("/about", False, False),
    ("/checkout", True, False),
    ("/orders/confirmation/:id", True, False),
    ("/profile", True, False),
    ("/profile/orders", True, False),
    ("/orders/:id", True, False),
    ("/invoice/:id", True, False),
    ("/admin", True, True),
    ("/admin/products", True, True),
    ("/admin/products/new", True, True),
    ("/admin/products/edit/:id", True, True),
    ("/admin/categories", True, True),
    ("/admin/orders", True, True),
    ("/admin/orders/:id", True, True),
    ("/admin/users", True, True),
    ("/admin/reports", True, True),
    ("/admin/settings", True, True),
)


def _compile(pattern: str):
    return re.compile("^" + re.sub(r":[A-Za-z_]+", r"[^/]+", pattern) + "/?$")


_COMPILED = [(_compile(pattern), protected, admin) for pattern, protected, admin in ROUTES]


def route_rule(path: str) -> Tuple[bool, bool]:
    """(protected, admin only) for a path; unknown paths are public."""
    bare = path.split("?", 1)[0]
    for regex, protected, admin in _COMPILED:
        if regex.match(bare):
            return protected, admin
    return False, False


def resolve(path: str, session) -> GuardDecision:
    protected, admin = route_rule(path)
    if not protected:
        return GuardDecision("render")
    return guard(session.is_authenticated, session.is_admin, session.is_loading, path, admin)


def price_label(product, session, currency: str = "DH") -> str:
    if not session.is_authenticated:
        return PRICE_HIDDEN
    return f"{product.price:.2f} {currency}"
