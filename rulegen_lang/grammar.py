SEXPR_GRAMMAR = r"""
    start: sexpr
         | NAME                    -> bare

    sexpr: "(" NAME qualifier* ")"

    ?qualifier: sexpr
              | NAME ":" sexpr     -> named
              | TYPE               -> type_qual
              | AUXINT             -> auxint_qual
              | AUX                -> aux_qual
              | NAME               -> atom

    // Qualifier bodies are host-language code; up to two nested levels of
    // the same bracket kind are accepted inside them.
    TYPE: /<(?:[^<>]|<(?:[^<>]|<[^<>]*>)*>)*>/
    AUXINT: /\[(?:[^\[\]]|\[(?:[^\[\]]|\[[^\[\]]*\])*\])*\]/
    AUX: /\{(?:[^{}]|\{(?:[^{}]|\{[^{}]*\})*\})*\}/
    NAME: /[A-Za-z_][A-Za-z_0-9]*/

    %import common.WS
    %ignore WS
"""
