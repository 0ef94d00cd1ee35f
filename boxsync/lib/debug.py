from lxml import etree


def xmlstring(root):
    if isinstance(root, str):
        return root
    if isinstance(root, bytes):
        return root.decode("utf-8", errors="replace")
    if not etree.iselement(root):
        return str(root)
    return etree.tostring(root, pretty_print=True).decode("utf-8")
