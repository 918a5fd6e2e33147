from collections.abc import Sequence
from dataclasses import replace

from docmap.core.modules.extension.models import BeforeWriteContext, Extension, WriteModification


class ChainExtension(Extension):
    """Runs several extensions in order, each one seeing the previous one's item."""

    def __init__(self, extensions: Sequence[Extension]) -> None:
        self.extensions = tuple(extensions)

    def before_write(self, context: BeforeWriteContext) -> WriteModification:
        transformed_item = None
        for extension in self.extensions:
            modification = extension.before_write(context)
            if modification.transformed_item is not None:
                transformed_item = modification.transformed_item
                context = replace(context, items=transformed_item)
        return WriteModification(transformed_item=transformed_item)


def resolve_extensions(extensions: Sequence[Extension]) -> Extension | None:
    """Collapse a list of extensions into the single extension a table calls."""
    if not extensions:
        return None
    if len(extensions) == 1:
        return extensions[0]
    return ChainExtension(extensions)
