"""
Mutation testing configuration for mutmut.

Only the transform package is mutated; the ambient utils (logging, metrics,
tracing) and the CLI wiring are skipped.
"""


def pre_mutation(context):
    """
    Hook called before each mutation.

    Skips mutations that cannot change a transformed record.
    """
    if not context.filename.startswith('src/cdc_flatten/'):
        context.skip = True
        return

    if '/cli/' in context.filename or context.filename.endswith('__init__.py'):
        context.skip = True
        return

    line = context.current_source_line.strip()

    # Log and span calls
    if line.startswith(('logger.', 'set_record_outcome(', 'add_span_attributes(')):
        context.skip = True

    # Error message text
    if line.startswith(('f"', "f'")):
        context.skip = True

    if '"""' in line or "'''" in line:
        context.skip = True
