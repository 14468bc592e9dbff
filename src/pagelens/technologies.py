"""
Technology detection by plain string matching over page assets and headers.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Sequence


def detect_technologies(
    javascripts: Optional[Sequence[str]] = None,
    stylesheets: Optional[Sequence[str]] = None,
    body: Optional[str] = None,
    meta: Optional[Mapping[str, str]] = None,
    headers: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """
    Guess frameworks, CMSs, analytics and server software used by a page.

    Header names are expected in lowercase. Only detected entries are present
    in the result; ``server`` holds the raw ``Server`` header when sent.
    """
    js_files = javascripts or []
    css_files = stylesheets or []
    page_body = body or ""
    page_meta = meta or {}
    response_headers = headers or {}
    powered_by = response_headers.get("x-powered-by", "")

    techs: Dict[str, Any] = {}

    def any_asset(files: Sequence[str], needle: str) -> bool:
        return any(needle in f for f in files)

    # Frameworks and libraries
    if any_asset(js_files, "jquery") or "jQuery" in page_body:
        techs["jquery"] = True
    if "data-reactroot" in page_body or any_asset(js_files, "react"):
        techs["react"] = True
    if "data-v-app" in page_body or any_asset(js_files, "vue"):
        techs["vue"] = True
    if "ng-version" in page_body or any_asset(js_files, "angular"):
        techs["angular"] = True
    if any_asset(css_files, "bootstrap") or 'class="container"' in page_body:
        techs["bootstrap"] = True
    if "Rails" in powered_by or "x-rails-env" in response_headers:
        techs["rails"] = True
    if "PHP" in powered_by:
        techs["php"] = True

    # CMS
    if "WordPress" in page_meta.get("generator", "") or "/wp-content/" in page_body:
        techs["wordpress"] = True
    if "Shopify.shop" in page_body:
        techs["shopify"] = True

    # Analytics
    if any_asset(js_files, "google-analytics.com"):
        techs["google_analytics"] = True

    # Server
    server = response_headers.get("server")
    if server:
        techs["server"] = server
        if "nginx" in server:
            techs["nginx"] = True
        if "Apache" in server:
            techs["apache"] = True
        if "IIS" in server:
            techs["iis"] = True
        if "Express" in powered_by:
            techs["express"] = True

    return techs
