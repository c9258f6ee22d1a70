"""
JavaScript evaluated inside the page.

Every script is a function expression. Page scripts take a single argument,
element scripts receive the element first, matching how Playwright's
``page.evaluate`` and ``element_handle.evaluate`` pass parameters.
"""

__all__ = ("READ_FLAG", "HAS_CLASS", "SMOOTH_SCROLL_TO_END", "SCROLL_TO_END")

# Resolves a dotted property path such as ``window._authed`` by plain property
# access, no code is compiled in the page. Returns null when a segment is
# missing, so the guard can tell a missing flag apart from a false one.
READ_FLAG = """
(path) => {
    const names = path.split(".");
    let value = window;
    for (const name of names[0] === "window" ? names.slice(1) : names) {
        if (value === null || value === undefined) {
            return null;
        }
        try {
            value = value[name];
        } catch (e) {
            return null;
        }
    }
    return value === undefined ? null : value;
}
"""

HAS_CLASS = "(el, className) => el.classList.contains(className)"

# Animates the container from its current offset to its maximum offset with
# an ease-out-back curve, sampled on animation frames. Resolves once the last
# frame has been drawn, so awaiting it is bounded by the duration.
SMOOTH_SCROLL_TO_END = """
([selector, duration]) => new Promise((resolve) => {
    const el = document.querySelector(selector);
    if (el === null) {
        resolve(false);
        return;
    }
    const start = el.scrollTop;
    const distance = Math.max(el.scrollHeight - el.clientHeight, 0) - start;
    const easeOutBack = (x) => {
        const c1 = 1.70158;
        const c3 = c1 + 1;
        return 1 + c3 * Math.pow(x - 1, 3) + c1 * Math.pow(x - 1, 2);
    };
    let startTime;
    const frame = (timestamp) => {
        if (startTime === undefined) {
            startTime = timestamp;
        }
        const progress = duration > 0 ? Math.min((timestamp - startTime) / duration, 1) : 1;
        el.scrollTo(0, start + distance * easeOutBack(progress));
        if (progress < 1) {
            window.requestAnimationFrame(frame);
        } else {
            resolve(true);
        }
    };
    window.requestAnimationFrame(frame);
})
"""

SCROLL_TO_END = """
([selector]) => {
    const el = document.querySelector(selector);
    if (el === null) {
        return false;
    }
    el.scrollTo(0, el.scrollHeight);
    return true;
}
"""
