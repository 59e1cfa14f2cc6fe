"""
Parsers backend: one ``parse_<Type>`` function per generated type.

Each parser consumes the events of one element from an ``XmlReader`` and
builds the matching dataclass. Unknown attributes and children go to the
capture fields, with each child's sibling position.
"""

from __future__ import annotations

from ..analyzer.classification import FieldKind
from ..analyzer.ir_nodes import IR, ChoiceDef, ClassDef, FieldDef, TypeKind, TypeRef
from .base import RUNTIME_PACKAGE, CodeBackend, py_string


class ParsersBackend(CodeBackend):
    """Renders the parsers module."""

    def _setup_templates(self) -> None:
        super()._setup_templates()
        self.class_template = self._template("parse_class")
        self.choice_template = self._template("parse_choice")
        self.suffix_template = self._template("parsers_suffix")

    def render_body(self, ir: IR, split: bool) -> str:
        self.python_imports = {
            ("__future__", "annotations"),
            ("collections.abc", "Callable"),
            ("typing", "Any"),
            (RUNTIME_PACKAGE, "runtime"),
        }
        self._used_types: set[str] = set(ir.type_order)

        chunks = []
        for name in ir.type_order:
            class_def = ir.get_class(name)
            if class_def is not None:
                chunks.append(self.class_template.render(self._prepare_class_context(class_def)))
                continue
            choice = ir.get_choice(name)
            if choice is not None:
                chunks.append(self.choice_template.render(self._prepare_choice_context(choice)))
        chunks.append(self.suffix_template.render(type_names=ir.type_order))

        if split:
            self._types_import(sorted(self._used_types) + ["ROOT_ELEMENTS"])
        return "\n\n\n".join(chunk.strip("\n") for chunk in chunks) + "\n"

    # Value expressions

    def value_expr(self, type_ref: TypeRef, raw: str, name: str) -> str:
        """Expression converting the string ``raw`` to the type's value."""
        if type_ref.codec == "str":
            return raw
        self.python_imports.add((f"{RUNTIME_PACKAGE}.runtime", "values"))
        if type_ref.codec == "enum":
            self._used_types.add(type_ref.name)
            return f"values.parse_enum({type_ref.name}, {raw}, {py_string(name)})"
        return f"values.parse_{type_ref.codec}({raw}, {py_string(name)})"

    def element_expr(self, type_ref: TypeRef, event: str, name: str) -> str:
        """Expression reading the element ``event`` into the type's value."""
        if type_ref.external is not None:
            self.python_imports.add((type_ref.external.parsers, ""))
            return f"{type_ref.external.parsers}.parse_{type_ref.name}(reader, {event})"
        if type_ref.kind in (TypeKind.CLASS, TypeKind.CHOICE):
            return f"parse_{type_ref.name}(reader, {event})"
        if type_ref.kind == TypeKind.MARKER:
            return f"reader.read_empty({event})"
        if type_ref.kind == TypeKind.RAW:
            return f"reader.capture({event})"
        return self.value_expr(type_ref, f"reader.read_text({event})", name)

    # Template contexts

    def _prepare_class_context(self, class_def: ClassDef) -> dict:
        attributes = [
            {
                "key": f.xml_key,
                "field": f.name,
                "xml": f.xml_name,
                "parse": self.value_expr(f.type_ref, "raw", f.xml_name),
                "required": f.is_required,
            }
            for f in class_def.attribute_fields
        ]

        children = [self._child_branch(f) for f in class_def.child_fields]
        required_children = [
            {"field": f.name, "xml": f.xml_name if f.kind == FieldKind.ELEMENT else f.type_ref.name}
            for f in class_def.child_fields
            if f.is_required
        ]

        text = None
        text_field = class_def.text_field
        if text_field is not None:
            text = {"field": text_field.name, "parse": self.value_expr(text_field.type_ref, '"".join(text_parts)', class_def.name)}

        if class_def.has_extra_children:
            unknown = "extra_children.append(runtime.PositionedNode(position, reader.capture(event)))"
        else:
            unknown = "reader.skip(event)"

        constructor_args = ["**fields"]
        if class_def.has_extra_attrs:
            constructor_args.append("extra_attrs=extra_attrs")
        if class_def.has_extra_children:
            constructor_args.append("extra_children=extra_children")
        if class_def.has_extra_text:
            constructor_args.append("extra_text=extra_text")
        if class_def.has_extra_namespaces:
            constructor_args.append("extra_namespaces=dict(start.namespaces)")

        return {
            "name": class_def.name,
            "attributes": attributes,
            "children": children,
            "required_children": required_children,
            "text": text,
            "unknown": unknown,
            "has_extra_attrs": class_def.has_extra_attrs,
            "has_extra_children": class_def.has_extra_children,
            "has_extra_text": class_def.has_extra_text,
            "constructor_args": ", ".join(constructor_args),
        }

    def _child_branch(self, field: FieldDef) -> dict:
        """
        Dispatch test and store statement for one child field.

        A single-valued field only matches while it is still unset, so a
        repeated occurrence falls through to the unknown-content branch.
        """
        if field.kind == FieldKind.GROUP:
            test = f"event.name in {field.type_ref.name}.TAGS"
            value = f"parse_{field.type_ref.name}(reader, event)"
        else:
            test = f"event.name == {py_string(field.xml_key)}"
            value = self.element_expr(field.type_ref, "event", field.xml_name)

        key = py_string(field.name)
        if field.is_list:
            store = f"fields.setdefault({key}, []).append({value})"
        else:
            test = f"{test} and {key} not in fields"
            store = f"fields[{key}] = {value}"
        return {"test": test, "store": store}

    def _prepare_choice_context(self, choice: ChoiceDef) -> dict:
        variants = [
            {"key": variant.xml_key, "tag": variant.tag, "parse": self.element_expr(variant.type_ref, "start", variant.tag)}
            for variant in choice.variants
        ]
        return {"name": choice.name, "variants": variants}
