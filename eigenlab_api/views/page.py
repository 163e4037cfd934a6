"""
HTML rendering of the calculator page.

The page is plain server-rendered HTML: forms post back to the app and the
step-by-step panels are ``<details>`` elements. MathJax only typesets the
TeX form of the characteristic polynomial.
"""

from html import escape
from typing import List, Optional, Sequence

from eigenlab import SUPPORTED_SIZES, CalculatorSession, PageState, format_real
from eigenlab.numeric import RESULT_DECIMALS

from ..services.session_service import cell_name

STYLE = """
body { font-family: system-ui, sans-serif; margin: 0; background: #0f172a; color: #e2e8f0; }
header, main, footer { max-width: 56rem; margin: 0 auto; padding: 1rem; }
.card { background: #1e293b; border: 1px solid #334155; border-radius: 0.75rem; padding: 1.25rem; margin: 1rem 0; }
.controls { display: flex; justify-content: space-between; flex-wrap: wrap; gap: 1rem; }
.controls form { display: inline; }
button { background: #334155; color: inherit; border: 0; border-radius: 0.375rem; padding: 0.5rem 0.9rem; cursor: pointer; }
button.active, button.primary { background: #6366f1; color: #fff; }
.matrix { display: inline-grid; gap: 0.4rem; padding: 0.5rem 1rem; border-left: 2px solid #818cf8; border-right: 2px solid #818cf8; }
.matrix span, .matrix input { font-family: ui-monospace, monospace; min-width: 3rem; text-align: center; }
.matrix input { width: 4rem; height: 2.5rem; background: #0f172a; color: inherit; border: 1px solid #475569; border-radius: 0.375rem; }
.label { display: block; font-size: 0.75rem; color: #94a3b8; }
.chip { display: inline-block; font-family: ui-monospace, monospace; background: #312e81; border-radius: 0.375rem; padding: 0.4rem 0.8rem; margin: 0.25rem; }
.error { background: #450a0a; border-color: #b91c1c; color: #fecaca; }
.ok { color: #4ade80; }
details { border: 1px solid #334155; border-radius: 0.5rem; margin: 0.5rem 0; }
summary { padding: 0.75rem 1rem; cursor: pointer; background: #1e293b; }
details > div { padding: 1rem; }
.mono { font-family: ui-monospace, monospace; }
.center { text-align: center; }
"""


def _matrix_html(rows: Sequence[Sequence[str]], label: Optional[str] = None) -> str:
    """Bracketed grid of already formatted cells"""
    columns = len(rows[0]) if rows else 1
    cells = "".join(f"<span>{escape(cell)}</span>" for row in rows for cell in row)
    caption = f'<span class="label">{escape(label)}</span>' if label else ""
    return (
        f'<div class="center">{caption}'
        f'<div class="matrix" style="grid-template-columns: repeat({columns}, auto)">'
        f"{cells}</div></div>"
    )


def _vector_html(components: Sequence[str]) -> str:
    return _matrix_html([[c] for c in components])


def _panel(number: int, title: str, body: str, open_: bool = False) -> str:
    """Collapsible derivation step"""
    return (
        f'<details{" open" if open_ else ""}>'
        f"<summary><strong>{number}</strong> {escape(title)}</summary>"
        f"<div>{body}</div></details>"
    )


def _input_value(value: float) -> str:
    if value.is_integer():
        return str(int(value))
    return repr(value)


def render_size_selector(session: CalculatorSession) -> str:
    buttons = []
    for size in SUPPORTED_SIZES:
        active = ' class="active"' if size == session.size else ""
        buttons.append(
            f'<button type="submit" name="size" value="{size}"{active}>{size}×{size}</button>'
        )
    buttons = " ".join(buttons)
    return f'<form method="post" action="/size"><span>Matrix Size:</span> {buttons}</form>'


def render_matrix_form(session: CalculatorSession) -> str:
    size = session.size
    inputs = "".join(
        f'<input type="number" step="any" placeholder="0" '
        f'name="{cell_name(i, j)}" aria-label="{cell_name(i, j)}" '
        f'value="{escape(_input_value(value))}"/>'
        for i, row in enumerate(session.matrix.rows)
        for j, value in enumerate(row)
    )
    busy = session.state is PageState.CALCULATING
    return (
        '<form method="post" action="/calculate" class="card">'
        '<h3 class="label">INPUT MATRIX A</h3>'
        f'<div class="center"><div class="matrix" style="grid-template-columns: repeat({size}, auto)">'
        f"{inputs}</div></div>"
        '<p class="center">'
        f'<button type="submit" class="primary"{" disabled" if busy else ""}>'
        f'{"Calculating..." if busy else "Calculate Eigenvalues"}</button> '
        '<button type="submit" formaction="/cells">Save</button>'
        "</p></form>"
    )


def render_results(session: CalculatorSession, decimals: int = RESULT_DECIMALS) -> str:
    if session.error:
        return f'<div class="card error"><p>{escape(session.error)}</p></div>'

    if session.result is None:
        return (
            '<div class="card center"><p>Enter your matrix values and click calculate '
            "to see eigenvalues and eigenvectors</p></div>"
        )

    result = session.result
    values = "".join(
        f'<span class="chip">λ{i} = {escape(v.to_string(decimals))}</span>'
        for i, v in enumerate(result.eigenvalues, start=1)
    )
    vectors = "".join(
        '<div class="card">'
        f'<span class="label">For λ{i} = {escape(v.to_string(decimals))}</span>'
        f"{_vector_html(vec.to_strings(decimals))}</div>"
        for i, (v, vec) in enumerate(result.pairs(), start=1)
    )
    return (
        f'<div class="card"><h3>λ Eigenvalues</h3>{values}</div>'
        f'<div class="card"><h3>v Eigenvectors</h3>{vectors}</div>'
        f"{render_steps(session)}"
    )


def render_steps(session: CalculatorSession) -> str:
    """Seven disclosure panels walking from A to verified eigenpairs"""
    derivation = session.derivation()
    report = session.verification()
    if derivation is None or report is None:
        return ""

    size = session.size
    matrix_rows = [[format_real(v) for v in row] for row in session.matrix.rows]
    panels: List[str] = []

    panels.append(_panel(1, "Input Matrix A", (
        _matrix_html(matrix_rows, "Matrix A")
        + f'<p class="center">This is your {size}×{size} input matrix.</p>'
    ), open_=True))

    panels.append(_panel(2, "Characteristic Equation Setup", (
        "<p>To find eigenvalues, we solve the characteristic equation:</p>"
        '<p class="center mono">det(A - λI) = 0</p>'
        f"<p>Where I is the {size}×{size} identity matrix and λ represents eigenvalues.</p>"
        + _matrix_html(derivation.characteristic_matrix, "A - λI")
    ), open_=True))

    body = (
        "<p>Computing the determinant of (A - λI) gives us the characteristic polynomial:</p>"
        f'<p class="center mono">{escape(derivation.polynomial)}</p>'
    )
    if derivation.tex:
        body += f'<p class="center">\\({escape(derivation.tex)}\\)</p>'
    if derivation.variables:
        body += (
            f"<p>For a {size}×{size} matrix, the characteristic polynomial is:</p>"
            f'<p class="center mono">{escape(derivation.general_form)}</p>'
            f"<p>Where {escape(derivation.variables)}</p>"
        )
    panels.append(_panel(3, "Characteristic Polynomial", body))

    body = "<p>Substituting the actual matrix values into the characteristic polynomial:</p>"
    if derivation.substitution_steps:
        body += "".join(f'<p class="mono">{escape(s)}</p>' for s in derivation.substitution_steps)
        body += f'<p class="center mono"><strong>{escape(derivation.polynomial)}</strong></p>'
    else:
        body += f"<p>{escape(derivation.note or '')}</p>"
    panels.append(_panel(4, "Substituting Matrix Values", body))

    values = "".join(
        f'<span class="chip">λ{step.index} = {escape(step.eigenvalue)}</span>'
        for step in session.steps()
    )
    body = f"<p>Solving the characteristic polynomial, we get the eigenvalues:</p><p class=\"center\">{values}</p>"
    if size == 2 and derivation.note:
        body += f'<p class="center">{escape(derivation.note)}</p>'
    panels.append(_panel(5, "Eigenvalues (Solutions)", body))

    body = (
        "<p>For each eigenvalue λ, we find the eigenvector v by solving:</p>"
        '<p class="center mono">(A - λI)v = 0</p>'
    )
    for step in session.steps():
        body += (
            '<div class="card">'
            f"<h4>For λ{step.index} = {escape(step.eigenvalue)}:</h4>"
            "<p>Substituting into (A - λI):</p>"
            + _matrix_html(step.shifted_matrix, f"A - ({step.eigenvalue})·I")
            + "<p>Solving (A - λI)v = 0 gives:</p>"
            + f'<span class="label">v{step.index} =</span>'
            + _vector_html(step.eigenvector)
            + "</div>"
        )
    panels.append(_panel(6, "Eigenvector Calculation", body))

    panels.append(_panel(7, "Verification", (
        '<p>We can verify each eigenpair by checking that <span class="mono">Av = λv</span></p>'
        f'<p class="center{" ok" if report.all_verified else ""}">{escape(report.summary())}</p>'
        '<p class="center label">Note: Eigenvectors are normalized and may differ by a scalar '
        "multiple from hand calculations.</p>"
    )))

    return '<div class="card"><h3>📐 Step-by-Step Calculation</h3>' + "".join(panels) + "</div>"


def render_page(
    session: CalculatorSession,
    title: str = "Eigen Explorer",
    decimals: int = RESULT_DECIMALS
) -> str:
    """Render the full calculator page for a session"""
    return (
        "<!DOCTYPE html>"
        '<html lang="en"><head><meta charset="utf-8"/>'
        f"<title>{escape(title)}</title>"
        f"<style>{STYLE}</style>"
        '<script defer src="https://cdn.jsdelivr.net/npm/mathjax@3/es5/tex-chtml.js"></script>'
        "</head><body>"
        f"<header><h1>Virtual Lab On Eigen Value &amp; Eigen Vectors</h1></header>"
        "<main>"
        '<div class="card"><h2>Matrix Eigenvalue &amp; Eigenvector Calculator</h2>'
        "<p>Enter your square matrix values below. The calculator will compute eigenvalues (λ) "
        'satisfying <span class="mono">det(A - λI) = 0</span> and their corresponding eigenvectors (v) '
        'satisfying <span class="mono">Av = λv</span>.</p></div>'
        '<div class="controls">'
        f"{render_size_selector(session)}"
        "<div>"
        '<form method="post" action="/example"><button type="submit">Load Example</button></form> '
        '<form method="post" action="/reset"><button type="submit">Clear</button></form>'
        "</div></div>"
        f"{render_matrix_form(session)}"
        '<h3 class="label">RESULTS</h3>'
        f"{render_results(session, decimals)}"
        "</main>"
        '<footer class="center label"><p>Supports real and complex eigenvalues • '
        "Matrices up to 4×4 • Powered by NumPy</p></footer>"
        "</body></html>"
    )
