"""``${name}`` placeholder interpolation."""

from __future__ import annotations

from collections.abc import Callable

MAX_INTERPOLATION_ITERATIONS = 10
PLACEHOLDER_OPEN = "${"


def interpolate(
    text: str,
    resolve: Callable[[str], str],
    max_iterations: int = MAX_INTERPOLATION_ITERATIONS,
) -> str:
    """Replace ``${name}`` placeholders in *text* using *resolve*.

    Values may themselves contain placeholders, so the whole string is
    re-scanned until nothing changes, no ``${`` remains, or *max_iterations*
    passes have run.  The cap bounds the work done on mutually-referencing
    variables such as ``a=${b}`` and ``b=${a}``.

    Args:
        text: Text to expand.
        resolve: Returns the value for a placeholder name; unknown names
            should map to ``""``.
        max_iterations: Maximum number of whole-string passes.

    Returns:
        The expanded text.  Unterminated ``${`` and stray ``$`` characters
        are left as-is.
    """
    if PLACEHOLDER_OPEN not in text:
        return text

    for _ in range(max_iterations):
        before = text
        text = interpolate_once(text, resolve)
        if text == before or PLACEHOLDER_OPEN not in text:
            break
    return text


def interpolate_once(text: str, resolve: Callable[[str], str]) -> str:
    """Run a single substitution pass over *text*.

    Substituted values are not re-scanned within the same pass.  A
    placeholder name containing its own placeholders (``${a_${n}}``) has the
    inner ones expanded first.  Nesting is tracked with an explicit stack, so
    arbitrarily deep input cannot exhaust the interpreter's recursion limit.
    """
    # Parallel stacks with one entry per open placeholder.
    starts: list[int] = []
    names: list[list[str]] = []
    braces: list[int] = []
    out: list[str] = []
    i = 0
    n = len(text)
    while i < n:
        if not starts:
            start = text.find(PLACEHOLDER_OPEN, i)
            if start == -1:
                out.append(text[i:])
                break
            out.append(text[i:start])
            starts.append(start)
            names.append([])
            braces.append(0)
            i = start + len(PLACEHOLDER_OPEN)
            continue

        if text.startswith(PLACEHOLDER_OPEN, i):
            starts.append(i)
            names.append([])
            braces.append(0)
            i += len(PLACEHOLDER_OPEN)
            continue

        char = text[i]
        i += 1
        if char == "{":
            braces[-1] += 1
        elif char == "}":
            if braces[-1]:
                braces[-1] -= 1
            else:
                starts.pop()
                braces.pop()
                name = "".join(names.pop())
                value = resolve(name) if name else ""
                (names[-1] if names else out).append(value)
                continue
        names[-1].append(char)

    if starts:
        # The outermost placeholder never closed: keep it verbatim.
        return "".join(out) + text[starts[0] :]
    return "".join(out)
