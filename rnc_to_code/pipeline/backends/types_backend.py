"""
Types backend: dataclasses, enums and aliases for the generated object model.
"""

from __future__ import annotations

from ..analyzer.classification import FieldKind
from ..analyzer.ir_nodes import IR, ChoiceDef, ClassDef, FieldDef, TypeKind
from .base import RUNTIME_PACKAGE, CodeBackend, annotation, py_string

RUNTIME_MODULE = f"{RUNTIME_PACKAGE}.runtime"


class TypesBackend(CodeBackend):
    """Renders the types module."""

    def _setup_templates(self) -> None:
        super()._setup_templates()
        self.namespaces_template = self._template("namespaces")
        self.enum_template = self._template("enum")
        self.aliases_template = self._template("aliases")
        self.class_template = self._template("class")
        self.choice_template = self._template("choice")
        self.suffix_template = self._template("types_suffix")

    def render_body(self, ir: IR, split: bool) -> str:
        self.python_imports = {("__future__", "annotations")}
        if ir.classes or ir.choices:
            self.python_imports.add(("dataclasses", ""))
        if ir.enums:
            self.python_imports.add(("enum", "Enum"))
        if ir.choices:
            self.python_imports.add(("typing", "ClassVar"))

        chunks = [self.namespaces_template.render(namespaces=ir.namespaces)]
        for enum_def in ir.enums:
            chunks.append(self.enum_template.render(name=enum_def.name, comment=enum_def.comment, members=enum_def.members))
        if ir.type_aliases:
            aliases = [{"name": alias.name, "target": alias.target.name, "comment": alias.comment} for alias in ir.type_aliases]
            chunks.append(self.aliases_template.render(aliases=aliases))

        for name in ir.type_order:
            class_def = ir.get_class(name)
            if class_def is not None:
                chunks.append(self.class_template.render(self._prepare_class_context(class_def)))
                continue
            choice = ir.get_choice(name)
            if choice is not None:
                chunks.append(self.choice_template.render(self._prepare_choice_context(choice)))

        all_names = self._public_names(ir) if split else []
        chunks.append(self.suffix_template.render(roots=ir.roots, all_names=all_names))
        return "\n\n\n".join(chunk.strip("\n") for chunk in chunks) + "\n"

    def _prepare_class_context(self, class_def: ClassDef) -> dict:
        declarations = [self._field_declaration(f) for f in class_def.fields]
        if class_def.has_extra_attrs:
            declarations.append("extra_attrs: dict[str, str] = dataclasses.field(default_factory=dict)")
        if class_def.has_extra_children:
            self.python_imports.add((RUNTIME_MODULE, "PositionedNode"))
            declarations.append("extra_children: list[PositionedNode] = dataclasses.field(default_factory=list)")
        if class_def.has_extra_text:
            self.python_imports.add((RUNTIME_MODULE, "PositionedText"))
            declarations.append("extra_text: list[PositionedText] = dataclasses.field(default_factory=list, compare=False, repr=False)")
        if class_def.has_extra_namespaces:
            declarations.append("extra_namespaces: dict[str, str] = dataclasses.field(default_factory=dict, compare=False, repr=False)")
        return {
            "name": class_def.name,
            "comment": class_def.comment,
            "declarations": declarations,
        }

    def _prepare_choice_context(self, choice: ChoiceDef) -> dict:
        value_types: list[str] = []
        for variant in choice.variants:
            value_type = self._annotation(variant.type_ref)
            if value_type not in value_types:
                value_types.append(value_type)
        return {
            "name": choice.name,
            "comment": choice.comment,
            "variants": choice.variants,
            "value_annotation": " | ".join(value_types) or "object",
        }

    def _annotation(self, type_ref) -> str:
        if type_ref.kind == TypeKind.RAW:
            self.python_imports.add((RUNTIME_MODULE, "RawXmlElement"))
        if type_ref.external is not None:
            self.python_imports.add((type_ref.external.module, ""))
        return annotation(type_ref)

    def _field_declaration(self, field: FieldDef) -> str:
        """
        Render one dataclass field.

        Lists default to empty, markers to False, and optional values to
        None. Required fields have no default. The field metadata carries the
        XML name, the field kind and, for gated fields, the feature name.
        """
        base = self._annotation(field.type_ref)
        metadata = {"xml": field.xml_name, "kind": field.kind.value}
        if field.feature:
            metadata["feature"] = field.feature
        meta = "{" + ", ".join(f"{py_string(k)}: {py_string(v)}" for k, v in metadata.items()) + "}"

        if field.is_list:
            return f"{field.name}: list[{base}] = dataclasses.field(default_factory=list, metadata={meta})"
        if field.type_ref.kind == TypeKind.MARKER:
            return f"{field.name}: bool = dataclasses.field(default=False, metadata={meta})"
        if field.is_required and field.kind != FieldKind.TEXT:
            return f"{field.name}: {base} = dataclasses.field(metadata={meta})"
        return f"{field.name}: {base} | None = dataclasses.field(default=None, metadata={meta})"

    def _public_names(self, ir: IR) -> list[str]:
        names = [ns.constant for ns in ir.namespaces]
        names.append("NAMESPACES")
        names.extend(ir.type_names)
        names.append("ROOT_ELEMENTS")
        return names
