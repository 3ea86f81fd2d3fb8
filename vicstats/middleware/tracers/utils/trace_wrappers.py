#!/usr/bin python3

# Imports
# ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
# Python:
from functools import wraps
from inspect import signature

# 3rd party:
from opencensus.trace.execution_context import get_opencensus_tracer
from opencensus.trace.span import SpanKind
from opencensus.trace.tracers.noop_tracer import NoopTracer

# Internal:

# ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

__all__ = [
    'trace_upstream_call'
]


def trace_upstream_call(*cls_attrs, dep_type="_name", **attrs):
    """
    Records an upstream call as an opencensus dependency span.

    The decorated coroutine must accept ``url`` and ``message`` arguments;
    they become the span's data and name respectively. Class attributes
    listed in ``cls_attrs`` and any keyword ``attrs`` are added to the span
    as ``<dependency type>.<key>``.

    Tracing is skipped altogether when no tracer is registered for the
    current execution context - e.g. in development or tests.
    """
    def wrapper(func):
        sig = signature(func)

        @wraps(func)
        async def process(klass, *args, **kwargs):
            tracer = get_opencensus_tracer()

            if tracer is None or isinstance(tracer, NoopTracer):
                return await func(klass, *args, **kwargs)

            bound_inputs = sig.bind(klass, *args, **kwargs)
            bound_inputs.apply_defaults()
            arguments = bound_inputs.arguments

            dependency_type = getattr(klass, dep_type)

            span = tracer.start_span()
            span.span_kind = SpanKind.CLIENT
            span.name = f"{func.__name__} {arguments.get('message', str())}".strip()
            span.add_attribute('dependency.type', dependency_type)
            span.add_attribute(f"{dependency_type}.data", str(arguments.get("url")))
            span.add_attribute(f"{dependency_type}.method.name", func.__name__)

            for key in cls_attrs:
                span.add_attribute(f"{dependency_type}.{key}", getattr(klass, key, None))

            for key, value in attrs.items():
                span.add_attribute(f"{dependency_type}.{key}", value)

            success = True
            try:
                return await func(klass, *args, **kwargs)
            except Exception as err:
                success = False
                span.add_attribute(f"{dependency_type}.error", str(err))
                raise err
            finally:
                span.add_attribute(f'{dependency_type}.success', success)
                tracer.end_span()

        return process

    return wrapper
