SEPARATORS = " \t\r\n"


def tokenize(line):
    """
    Split a raw line into arguments.
    No quoting: every run of whitespace separates two arguments.
    Returns: list of str (empty for a blank line)
    """
    if not line:
        return []
    for sep in SEPARATORS[1:]:
        line = line.replace(sep, " ")
    return [tok for tok in line.split(" ") if tok]


def build_full_command(argv):
    """Rebuild the command text shown in job listings"""
    return " ".join(argv)
