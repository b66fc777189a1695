# book2pdf/render/scripts.py
"""
Scripts evaluated inside rendered pages.

Every script is a function expression, so the renderer invokes it and returns
its (JSON-serialisable) result.
"""

# Collapsed navigation of both GitBook generations and Docusaurus. One pass
# over the matches found up front; expanded items are not re-queried.
EXPAND_MENUS_JS = r"""
() => {
    const selectorGroups = [
        // GitBook (legacy) table of contents
        ['a[data-rnwrdesktop-fnigne="true"] > div[tabindex="0"]'],
        // GitBook (current) expandable navigation items
        [
            'button[aria-expanded="false"]',
            'button[data-state="closed"]',
            '[role="button"][aria-expanded="false"]',
        ],
        // Docusaurus collapsible sidebar categories
        [
            '.menu__list-item--collapsed > .menu__link',
            '.menu__link--sublist[aria-expanded="false"]',
            'button.menu__link--sublist',
            '.theme-doc-sidebar-item-category button[aria-expanded="false"]',
            '.menu__caret',
            '[class*="collapsible"] button[aria-expanded="false"]',
        ],
        ['.menu__list-item--collapsed'],
    ];
    let clicked = 0;
    for (const group of selectorGroups) {
        for (const element of document.querySelectorAll(group.join(', '))) {
            element.click();
            clicked += 1;
        }
    }
    return clicked;
}
"""

FIRST_DOC_LINK_JS = r"""
() => {
    for (const link of document.querySelectorAll('a[href^="/"]')) {
        const href = link.getAttribute('href');
        if (href && href !== '/' && !href.includes('#') && !href.includes('assets')) {
            return link.href;
        }
    }
    return null;
}
"""

PREPARE_PAGE_JS = r"""
() => {
    for (const section of document.querySelectorAll('div[aria-controls^="expandable-body-"]')) {
        section.click();
    }

    const itemSelectorsToRemove = [
        'header + div[data-rnwrdesktop-hidden="true"]',
        'div[aria-label^="Search"]',
        'div[aria-label="Page actions"]',
    ];
    for (const item of document.querySelectorAll(itemSelectorsToRemove.join(', '))) {
        item.remove();
    }

    const lastModified = document.querySelector('div[dir="auto"] > span[aria-label]');
    if (lastModified) {
        lastModified.innerText = lastModified.getAttribute('aria-label');
    }
    return true;
}
"""

SITE_INFO_JS = r"""
() => {
    const logoSelectors = [
        'img[alt*="logo" i]',
        'img[src*="logo" i]',
        'img[class*="logo" i]',
        '.navbar__logo img',
        '.navbar-brand img',
        'header img',
        '.header img',
    ];
    let logo = null;
    for (const selector of logoSelectors) {
        const img = document.querySelector(selector);
        if (img && img.src) {
            logo = img.src;
            break;
        }
    }

    const text = (el) => (el && el.textContent ? el.textContent.trim() : '');
    const title = (document.title || '').trim()
        || text(document.querySelector('h1'))
        || text(document.querySelector('.navbar-brand, .navbar__brand, .navbar__title'))
        || null;

    return {title: title, logo: logo, url: window.location.href};
}
"""

__all__ = ["EXPAND_MENUS_JS", "FIRST_DOC_LINK_JS", "PREPARE_PAGE_JS", "SITE_INFO_JS"]
