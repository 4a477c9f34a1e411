from marshmallow import EXCLUDE, Schema


def camelcase(name):
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


class CamelCaseMixin:
    """Expose snake_case attributes under camelCase JSON keys."""

    def on_bind_field(self, field_name, field_obj):
        field_obj.data_key = camelcase(field_obj.data_key or field_name)


class RequestSchema(CamelCaseMixin, Schema):
    """Base for request bodies and query strings; unknown keys are dropped."""

    class Meta:
        unknown = EXCLUDE
