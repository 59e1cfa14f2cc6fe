"""
Serializers backend: one ``write_<Type>`` function per generated type.

Each serializer mirrors its parser: known attributes then captured ones,
known children in schema order with captured children put back at their
recorded sibling positions through ``ChildCursor``.
"""

from __future__ import annotations

from ..analyzer.ir_nodes import IR, ChoiceDef, ClassDef, FieldDef, RootElement, TypeKind, TypeRef
from .base import RUNTIME_PACKAGE, CodeBackend, py_string


class SerializersBackend(CodeBackend):
    """Renders the serializers module."""

    def _setup_templates(self) -> None:
        super()._setup_templates()
        self.class_template = self._template("write_class")
        self.choice_template = self._template("write_choice")
        self.suffix_template = self._template("serializers_suffix")

    def render_body(self, ir: IR, split: bool) -> str:
        self.python_imports = {
            ("__future__", "annotations"),
            ("collections.abc", "Callable"),
            ("typing", "Any"),
            (RUNTIME_PACKAGE, "runtime"),
        }

        chunks = []
        for name in ir.type_order:
            class_def = ir.get_class(name)
            if class_def is not None:
                chunks.append(self.class_template.render(self._prepare_class_context(class_def)))
                continue
            choice = ir.get_choice(name)
            if choice is not None:
                chunks.append(self.choice_template.render(self._prepare_choice_context(choice)))
        chunks.append(self.suffix_template.render(type_names=ir.type_order, roots=self._root_tags(ir.roots)))

        if split:
            self._types_import(sorted(ir.type_order) + ["NAMESPACES"])
        return "\n\n\n".join(chunk.strip("\n") for chunk in chunks) + "\n"

    # Value expressions

    def value_expr(self, type_ref: TypeRef, value: str) -> str:
        """Expression converting ``value`` to its string form."""
        if type_ref.codec == "str":
            return value
        self.python_imports.add((f"{RUNTIME_PACKAGE}.runtime", "values"))
        return f"values.format_{type_ref.codec}({value})"

    def element_statement(self, type_ref: TypeRef, value: str, key: str) -> str:
        """Statement writing ``value`` as the element ``key``."""
        if type_ref.external is not None:
            self.python_imports.add((type_ref.external.serializers, ""))
            return f"{type_ref.external.serializers}.write_{type_ref.name}({value}, writer, {py_string(key)})"
        if type_ref.kind == TypeKind.CLASS:
            return f"write_{type_ref.name}({value}, writer, {py_string(key)})"
        if type_ref.kind == TypeKind.CHOICE:
            return f"write_{type_ref.name}({value}, writer)"
        if type_ref.kind == TypeKind.MARKER:
            return f"writer.empty({py_string(key)})"
        if type_ref.kind == TypeKind.RAW:
            return f"writer.write_raw({value})"
        return f"writer.text_element({py_string(key)}, {self.value_expr(type_ref, value)})"

    # Template contexts

    def _prepare_class_context(self, class_def: ClassDef) -> dict:
        attributes = [
            {
                "key": f.xml_key,
                "field": f.name,
                "required": f.is_required,
                "format": self.value_expr(f.type_ref, f"value.{f.name}"),
            }
            for f in class_def.attribute_fields
        ]

        text = None
        text_field = class_def.text_field
        if text_field is not None:
            text = {"field": text_field.name, "format": self.value_expr(text_field.type_ref, f"value.{text_field.name}")}

        return {
            "name": class_def.name,
            "attributes": attributes,
            "text": text,
            "children": [self._child_block(f) for f in class_def.child_fields],
            "has_extra_attrs": class_def.has_extra_attrs,
            "has_extra_children": class_def.has_extra_children,
            "has_extra_text": class_def.has_extra_text,
            "has_extra_namespaces": class_def.has_extra_namespaces,
        }

    def _child_block(self, field: FieldDef) -> dict:
        if field.is_list:
            return {"mode": "list", "field": field.name, "write": self.element_statement(field.type_ref, "item", field.xml_key)}

        write = self.element_statement(field.type_ref, f"value.{field.name}", field.xml_key)
        if field.is_required:
            return {"mode": "required", "field": field.name, "write": write}
        if field.type_ref.kind == TypeKind.MARKER:
            condition = f"value.{field.name}"
        else:
            condition = f"value.{field.name} is not None"
        return {"mode": "optional", "field": field.name, "write": write, "condition": condition}

    def _prepare_choice_context(self, choice: ChoiceDef) -> dict:
        variants = [
            {"tag": variant.tag, "write": self.element_statement(variant.type_ref, "value.value", variant.xml_key)}
            for variant in choice.variants
        ]
        return {"name": choice.name, "variants": variants}

    @staticmethod
    def _root_tags(roots: list[RootElement]) -> list[RootElement]:
        """First root element per type."""
        seen: set[str] = set()
        result = []
        for root in roots:
            if root.type_name not in seen:
                seen.add(root.type_name)
                result.append(root)
        return result
