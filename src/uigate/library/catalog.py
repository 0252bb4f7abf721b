"""
Component Catalog
The fixed set of components generated markup may use.
"""

from typing import Any

from .schemas import ComponentSchema, PropKind, PropSpec, StructuralConstraints

SPACING = ("sm", "md", "lg")


def _prop(kind: PropKind, description: str, required: bool = False, default: Any = None,
          values: tuple[str, ...] | None = None) -> PropSpec:
    return PropSpec(kind=kind, required=required, default=default, values=values, description=description)


def _children(description: str = "Child components") -> PropSpec:
    return _prop(PropKind.ARRAY, description)


CATALOG: tuple[ComponentSchema, ...] = (
    # Layout
    ComponentSchema(
        name="Stack",
        display_name="Stack",
        description="Directional layout container",
        props={
            "direction": _prop(PropKind.ENUM, "Flex direction", required=True, values=("horizontal", "vertical")),
            "spacing": _prop(PropKind.ENUM, "Gap between children", default="md", values=SPACING),
            "children": _children(),
        },
        constraints=StructuralConstraints(
            allowed_children=(
                "Button", "Card", "Input", "Select", "TextArea",
                "Header", "Modal", "List", "Grid", "Text",
            ),
        ),
    ),
    ComponentSchema(
        name="Grid",
        display_name="Grid",
        description="CSS Grid layout",
        props={
            "columns": _prop(PropKind.NUMBER, "Number of columns", required=True),
            "gap": _prop(PropKind.ENUM, "Grid gap", default="md", values=SPACING),
            "children": _children(),
        },
        constraints=StructuralConstraints(allowed_children=("Card", "Button", "Input", "Header")),
    ),
    # Content
    ComponentSchema(
        name="Header",
        display_name="Header",
        description="Page header with optional navigation",
        props={
            "title": _prop(PropKind.STRING, "Header title text", required=True),
            "subtitle": _prop(PropKind.STRING, "Optional subtitle"),
            "showNav": _prop(PropKind.BOOLEAN, "Show navigation bar", default=False),
        },
        constraints=StructuralConstraints(allowed_parents=("Stack", "Grid"), max_children=0),
    ),
    ComponentSchema(
        name="Card",
        display_name="Card",
        description="Content container with elevation",
        props={
            "title": _prop(PropKind.STRING, "Card title"),
            "subtitle": _prop(PropKind.STRING, "Card subtitle"),
            "children": _children("Card content"),
        },
        constraints=StructuralConstraints(
            allowed_children=(
                "Button", "Input", "Select", "TextArea",
                "Stack", "List", "Text", "Alert", "Divider", "Grid",
            ),
        ),
    ),
    ComponentSchema(
        name="Text",
        display_name="Text",
        description="Text content component",
        props={
            "content": _prop(PropKind.STRING, "Text content", required=True),
            "variant": _prop(PropKind.ENUM, "Text size variant", default="body", values=("body", "small", "large")),
        },
        constraints=StructuralConstraints(max_children=0),
    ),
    # Forms
    ComponentSchema(
        name="Input",
        display_name="Input",
        description="Text input field",
        props={
            "label": _prop(PropKind.STRING, "Input label"),
            "type": _prop(PropKind.ENUM, "Input type", default="text", values=("text", "email", "password", "number")),
            "placeholder": _prop(PropKind.STRING, "Placeholder text"),
            "required": _prop(PropKind.BOOLEAN, "Required field", default=False),
            "disabled": _prop(PropKind.BOOLEAN, "Disabled state", default=False),
        },
        constraints=StructuralConstraints(max_children=0),
    ),
    ComponentSchema(
        name="TextArea",
        display_name="TextArea",
        description="Multi-line text input",
        props={
            "label": _prop(PropKind.STRING, "TextArea label"),
            "placeholder": _prop(PropKind.STRING, "Placeholder text"),
            "rows": _prop(PropKind.NUMBER, "Number of rows", default=4),
            "required": _prop(PropKind.BOOLEAN, "Required field", default=False),
        },
        constraints=StructuralConstraints(max_children=0),
    ),
    ComponentSchema(
        name="Select",
        display_name="Select",
        description="Dropdown selector",
        props={
            "label": _prop(PropKind.STRING, "Select label"),
            "options": _prop(PropKind.ARRAY, "Array of option strings", required=True),
            "required": _prop(PropKind.BOOLEAN, "Required field", default=False),
            "disabled": _prop(PropKind.BOOLEAN, "Disabled state", default=False),
        },
        constraints=StructuralConstraints(max_children=0),
    ),
    # Interactive
    ComponentSchema(
        name="Button",
        display_name="Button",
        description="Interactive button",
        props={
            "children": _prop(PropKind.STRING, "Button text", required=True),
            "variant": _prop(PropKind.ENUM, "Visual variant", default="primary", values=("primary", "secondary", "danger")),
            "disabled": _prop(PropKind.BOOLEAN, "Disabled state", default=False),
            "fullWidth": _prop(PropKind.BOOLEAN, "Full width button", default=False),
        },
        constraints=StructuralConstraints(max_children=0),
    ),
    # Overlay
    ComponentSchema(
        name="Modal",
        display_name="Modal",
        description="Dialog overlay",
        props={
            "title": _prop(PropKind.STRING, "Modal title", required=True),
            "open": _prop(PropKind.BOOLEAN, "Modal visibility state", required=True),
            "children": _children("Modal content"),
        },
        constraints=StructuralConstraints(allowed_children=("Card", "Stack", "Button", "Text")),
    ),
    ComponentSchema(
        name="List",
        display_name="List",
        description="Iterable list component",
        props={
            "items": _prop(PropKind.ARRAY, "Array of items to render", required=True),
            "renderItem": _prop(PropKind.STRING, "Template for each item", required=True),
        },
        constraints=StructuralConstraints(max_children=0),
    ),
    ComponentSchema(
        name="Divider",
        display_name="Divider",
        description="Visual separator",
        props={
            "spacing": _prop(PropKind.ENUM, "Divider spacing", default="md", values=SPACING),
        },
        constraints=StructuralConstraints(max_children=0),
    ),
    ComponentSchema(
        name="Alert",
        display_name="Alert",
        description="Alert/notification message",
        props={
            "message": _prop(PropKind.STRING, "Alert message text", required=True),
            "type": _prop(PropKind.ENUM, "Alert type", default="info", values=("info", "success", "warning", "error")),
        },
        constraints=StructuralConstraints(max_children=0),
    ),
)
