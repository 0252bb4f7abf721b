"""Tests for the markup parser, emitter and analyzer."""

import pytest

from uigate.markup import (
    MarkupAnalyzer,
    MarkupParseError,
    ast,
    detect_patterns,
    escape_text,
    format_report,
    parse,
)
from uigate.models import ComponentNode, GenerationPlan, ViolationCategory


@pytest.fixture
def plan(sample_plan):
    return GenerationPlan.model_validate(sample_plan)


@pytest.fixture
def analyzer(structural, scanner):
    return MarkupAnalyzer(structural, scanner)


# ============================================================================
# Emitter
# ============================================================================

@pytest.mark.unit
def test_emit_sample_plan(emitter, plan, sample_code):
    assert emitter.emit(plan) == sample_code


@pytest.mark.unit
def test_emit_is_deterministic(emitter, plan):
    assert emitter.emit(plan) == emitter.emit(GenerationPlan.model_validate(plan.model_dump()))


@pytest.mark.unit
def test_emit_serializes_non_string_props(emitter):
    plan = GenerationPlan(
        components=[
            ComponentNode(id="g", kind="Grid", props={"columns": 2, "gap": "sm"}),
            ComponentNode(id="s", kind="Select", props={"options": ["a", "b"], "label": "Pick"}),
        ]
    )
    code = emitter.emit(plan)
    assert '<Grid columns={2} gap="sm" />' in code
    # schema order, not insertion order
    assert '<Select label="Pick" options={["a","b"]} />' in code


@pytest.mark.unit
def test_emit_skips_none_props(emitter):
    plan = GenerationPlan(components=[ComponentNode(id="c", kind="Card", props={"title": None})])
    assert "      <Card />" in emitter.emit(plan)


@pytest.mark.unit
def test_emit_escapes_text(emitter):
    title = 'Tom & "Jerry" {x}'
    plan = GenerationPlan(
        components=[
            ComponentNode(id="c", kind="Card", props={"title": title}, children=["a <b> c"]),
        ]
    )
    code = emitter.emit(plan)
    assert 'title="Tom &amp; &quot;Jerry&quot; &#123;x&#125;"' in code
    assert "a &lt;b&gt; c" in code

    card = next(node for node in ast.walk(parse(code)) if isinstance(node, ast.Element) and node.name == "Card")
    assert card.attributes[0].value.value == title


@pytest.mark.unit
def test_emit_without_layout(emitter):
    plan = GenerationPlan(components=[ComponentNode(id="d", kind="Divider")], layout=None)
    code = emitter.emit(plan)
    assert '<Stack direction="vertical" spacing="md">' in code
    assert "import { Divider, Stack } from 'my-ui-library';" in code


@pytest.mark.unit
def test_escape_text():
    assert escape_text("<a & b>") == "&lt;a &amp; b&gt;"
    assert escape_text("plain") == "plain"


# ============================================================================
# Parser
# ============================================================================

@pytest.mark.unit
def test_parse_emitted_module(sample_code):
    module = parse(sample_code)
    assert [node.type for node in module.body] == ["ImportDecl", "ImportDecl", "ExportDefault"]
    assert module.body[1].names == ["Button", "Card", "Header", "Input", "Stack"]
    assert module.body[1].source == "my-ui-library"

    root = ast.first_element(module)
    assert root.name == "Stack"
    assert root.loc.line == 6
    assert [a.name for a in root.attributes] == ["direction", "spacing"]


@pytest.mark.unit
def test_parse_adjacent_elements():
    module = parse("<Card /><Button />")
    assert [node.name for node in module.body] == ["Card", "Button"]


@pytest.mark.unit
def test_parse_comparison_still_binary():
    node = parse("a < b").body[0]
    assert isinstance(node, ast.Binary)
    assert node.operator == "<"


@pytest.mark.unit
def test_parse_arrow_and_member_call():
    call = parse("items.map((item) => <Text content={item} />)").body[0]
    assert isinstance(call, ast.CallExpr)
    assert ast.callee_name(call.callee) == "map"
    arrow = call.arguments[0]
    assert isinstance(arrow, ast.ArrowFn)
    assert [p.name for p in arrow.params] == ["item"]
    assert isinstance(arrow.body, ast.Element)


@pytest.mark.unit
def test_parse_template_literal():
    node = parse("`hello ${name}!`").body[0]
    assert isinstance(node, ast.TemplateLiteral)
    assert node.quasis == ["hello ", "!"]
    assert node.expressions[0].name == "name"


@pytest.mark.unit
def test_parse_dynamic_import():
    call = parse("import('fs')").body[0]
    assert isinstance(call, ast.CallExpr)
    assert ast.callee_name(call.callee) == "import"


@pytest.mark.unit
def test_parse_skips_comments():
    module = parse("// header\n/* block */ <Card />")
    assert len(module.body) == 1


@pytest.mark.unit
def test_parse_error_reports_location():
    with pytest.raises(MarkupParseError) as exc_info:
        parse("<Card>\n  <Button>\n</Card>")
    assert exc_info.value.location.line == 3
    assert exc_info.value.location.column == 0
    assert "</Button>" in exc_info.value.message


@pytest.mark.unit
@pytest.mark.parametrize(
    "source",
    [
        "<Card>" * 2000 + "</Card>" * 2000,
        "(" * 3000 + "1" + ")" * 3000,
        "[" * 3000 + "]" * 3000,
        "<Card>{" * 500 + "1" + "}</Card>" * 500,
    ],
)
def test_parse_rejects_excessive_nesting(source):
    with pytest.raises(MarkupParseError) as exc_info:
        parse(source)
    assert "Nesting deeper than" in exc_info.value.message


@pytest.mark.unit
def test_parse_long_flat_chains():
    # chains grow the tree, not the nesting
    assert isinstance(parse("!" * 3000 + "x").body[0], ast.Unary)
    assert isinstance(parse(" + ".join(["a"] * 3000)).body[0], ast.Binary)


@pytest.mark.unit
@pytest.mark.parametrize(
    "source",
    [
        "const x = 1;",
        "<Card>",
        "'unterminated",
        "<Card>oops}</Card>",
        "a--",
    ],
)
def test_parse_rejects_unsupported_source(source):
    with pytest.raises(MarkupParseError):
        parse(source)


# ============================================================================
# Analyzer
# ============================================================================

@pytest.mark.unit
def test_analyze_clean_markup(analyzer, sample_code):
    analysis = analyzer.analyze(sample_code)
    assert analysis.parsed
    assert analysis.violations == []
    assert analysis.components == ["Stack", "Header", "Card", "Input", "Button"]
    assert analysis.metrics.component_count == 5
    assert analysis.metrics.complexity == "simple"
    assert analysis.metrics.depth == 3
    assert analysis.metrics.blank_lines == 2
    assert analysis.patterns.has_form
    assert not analysis.patterns.has_modal
    assert "No issues detected" in format_report(analysis)


@pytest.mark.unit
def test_analyze_unparsable_markup(analyzer):
    analysis = analyzer.analyze("<Card><Button></Card>")
    assert not analysis.parsed
    assert analysis.components == ["Card", "Button"]
    assert analysis.violations[0].category is ViolationCategory.SCHEMA_ERROR
    assert "## Issues" in format_report(analysis)


@pytest.mark.unit
def test_analyze_collects_both_scans(analyzer):
    analysis = analyzer.analyze('<Card style={{color: "red"}} />')
    categories = {v.category for v in analysis.violations}
    assert ViolationCategory.INLINE_STYLE in categories
    assert ViolationCategory.UNKNOWN_PROP in categories


@pytest.mark.unit
def test_cyclomatic_complexity(analyzer):
    analysis = analyzer.analyze("a && b || c")
    assert analysis.metrics.cyclomatic_complexity == 3


@pytest.mark.unit
def test_detect_patterns():
    patterns = detect_patterns("<Modal><List items={[]} /></Modal> dark")
    assert patterns.has_modal
    assert patterns.has_list
    assert patterns.has_dark_mode
    assert not patterns.has_table


@pytest.mark.unit
@pytest.mark.parametrize(
    "code",
    [
        "<Card>" * 2000 + "</Card>" * 2000,
        "(" * 3000 + "1" + ")" * 3000,
    ],
)
def test_analyze_deeply_nested_markup(analyzer, code):
    analysis = analyzer.analyze(code)
    assert not analysis.parsed
    assert analysis.violations[0].category is ViolationCategory.SCHEMA_ERROR


@pytest.mark.unit
def test_analyze_long_chain_depth(analyzer):
    analysis = analyzer.analyze("<Card>{" + " + ".join(["a"] * 3000) + "}</Card>")
    assert analysis.parsed
    assert analysis.metrics.depth == 1
