from plc.analyzer import analyze
from plc.generator import escape, generate_source, jvm_name
from plc.parser import parse_program
from plc.types import ANY, DECIMAL, INTEGER, NIL, Type


def generate(source):
    ast = parse_program(source)
    analyze(ast)
    return generate_source(ast)


def test_hello_class_layout():
    java = generate(
        'VAL greeting: String = "Hi";\n'
        'FUN main(): Integer DO\n'
        '    print(greeting);\n'
        '    RETURN 0;\n'
        'END\n'
    )
    assert java == (
        'public class Main {\n'
        '\n'
        '    final String greeting = "Hi";\n'
        '\n'
        '    public static void main(String[] args) {\n'
        '        System.exit(new Main().main());\n'
        '    }\n'
        '\n'
        '    int main() {\n'
        '        System.out.println(greeting);\n'
        '        return 0;\n'
        '    }\n'
        '\n'
        '}'
    )


def test_no_globals():
    java = generate('FUN main(): Integer DO RETURN 0; END')
    assert java.startswith('public class Main {\n\n    public static void main(String[] args) {')


def test_type_names():
    assert jvm_name(INTEGER) == 'int'
    assert jvm_name(DECIMAL) == 'double'
    assert jvm_name(ANY) == 'Object'
    assert jvm_name(NIL) == 'Void'
    assert jvm_name(Type.list_of(INTEGER)) == 'int[]'


def test_escapes():
    assert escape('a\nb"c', '"') == 'a\\nb\\"c'
    assert escape("'", "'") == "\\'"


def test_lists_power_and_parameters():
    java = generate(
        'LIST xs: Decimal = [1.0, 2.5];\n'
        'FUN scale(d: Decimal, n) DO RETURN (d ^ 2) * 1.0; END\n'
        'FUN main(): Integer DO RETURN 0; END\n'
    )
    assert 'double[] xs = {1.0, 2.5};' in java
    assert 'double scale(double d, Object n) {' in java
    assert 'return (Math.pow(d, 2)) * 1.0;' in java


def test_control_flow():
    java = generate(
        'FUN main(): Integer DO\n'
        '    LET i = 0;\n'
        '    WHILE i < 3 DO\n'
        '        IF i == 1 DO\n'
        '            print(\'x\');\n'
        '        ELSE\n'
        '            i = i + 1;\n'
        '        END\n'
        '    END\n'
        '    SWITCH i\n'
        '        CASE 1:\n'
        '            print("one");\n'
        '        DEFAULT\n'
        '            print(NIL);\n'
        '    END\n'
        '    RETURN i;\n'
        'END\n'
    )
    assert (
        '        int i = 0;\n'
        '        while (i < 3) {\n'
        '            if (i == 1) {\n'
        "                System.out.println('x');\n"
        '            } else {\n'
        '                i = i + 1;\n'
        '            }\n'
        '        }\n'
        '        switch (i) {\n'
        '            case 1:\n'
        '                System.out.println("one");\n'
        '                break;\n'
        '            default:\n'
        '                System.out.println(null);\n'
        '                break;\n'
        '        }\n'
        '        return i;\n'
    ) in java
