"""
Script instrumentation: declares the forwarding prop
"""


def script_instrument(content: str, prop_name: str) -> str:
    """
    Append the exported forwarding prop declaration to script text

    Args:
        content: Instance script content (may be empty)
        prop_name: Forwarding prop name

    Returns:
        Script text ending with: export let <prop_name> = ""

    Example:
        >>> script_instrument("let x = 1", "_forwardedClass")
        'let x = 1\\nexport let _forwardedClass = ""\\n'
    """
    return f'{content}\nexport let {prop_name} = ""\n'
