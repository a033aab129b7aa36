# -*- coding: utf-8 -*-
import ast
from contextlib import contextmanager
from typing import Sequence, Union


class SkipUnboundArgsMixin(ast.NodeVisitor):
    # parameter names are bound by the call, so only the pieces evaluated at
    # definition time get visited
    def visit_arguments(self, node: ast.arguments) -> None:
        self.visit(node.defaults)
        self.visit(node.kw_defaults)
        for arg in [
            *getattr(node, "posonlyargs", []),
            *node.args,
            node.vararg,
            *node.kwonlyargs,
            node.kwarg,
        ]:
            if arg is not None:
                self.visit(arg.annotation)


class VisitListsMixin(ast.NodeVisitor):
    def generic_visit(self, node: Union[ast.AST, Sequence[ast.AST]]):
        if node is None:
            return
        elif isinstance(node, Sequence):
            for item in node:
                self.visit(item)
        else:
            super().generic_visit(node)


class SaveOffAttributesMixin:
    @contextmanager
    def push_attributes(self, **kwargs):
        for k in kwargs:
            if not hasattr(self, k):
                raise AttributeError(
                    "requested to save unfound attribute %s of object %s" % (k, self)
                )
        saved_attributes = {}
        for k in kwargs:
            saved_attributes[k] = getattr(self, k)
        for k, v in kwargs.items():
            setattr(self, k, v)
        try:
            yield
        finally:
            for k, v in saved_attributes.items():
                setattr(self, k, v)
