# results that count as success, see `is_success`
TRUE = ''
FALSE = '1'

keywords = ['if', 'then', 'else', 'elif', 'fi',
            'for', 'in', 'do', 'done',
            'while', 'case', 'esac',
            'function', 'set', 'exit', 'echo']

comparators = ['==', '!=', '>', '<', '>=', '<=']

# tokens that end a flat command
terminators = [';', 'then', 'do', 'done', 'fi', 'esac', ';;', 'else', 'elif']

# characters that may occur in a bare word
word_chars = r'\w\-./~:@%+,*?'

# use dedicated variables to simplify searching
IF = 'if'
THEN = 'then'
ELSE = 'else'
ELIF = 'elif'
FI = 'fi'
FOR = 'for'
IN = 'in'
DO = 'do'
DONE = 'done'
WHILE = 'while'
CASE = 'case'
ESAC = 'esac'
FUNCTION = 'function'


def is_success(result) -> bool:
    """Interpret the status of a command.
    None, an empty string and zero are success. Anything else is failure.
    """
    if result is None or result is True:
        return True

    if isinstance(result, bool):
        return False

    if isinstance(result, int):
        return result == 0

    return str(result).strip() in ('', '0')
