from __future__ import annotations

import sys
import textwrap
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[3]
SRC_ROOT = REPO_ROOT / "tools" / "abi_thunk_codegen" / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from abi_thunk_codegen.native_emitter import NativeRenderOptions, render_native_wrapper
from abi_thunk_codegen.parser import parse_text

ADD_IDL = "RETURNTYPES\nint\nNORMALTYPES\nint\nFUNCTIONS\nint Add(int a, int b)\n"

MIXED_IDL = """\
NORMALTYPES
void
int
BoolT,[MarshalAs(UnmanagedType.I1)]bool,bool
RefT*,ref RefStruct
FUNCTIONS
BoolT Check(RefT* value)
void Reset()
[ManualNativeWrapper] int Count(int bucket)
int Last()
"""


class NativeEmitterTests(unittest.TestCase):
    def test_renders_add_example(self) -> None:
        expected = textwrap.dedent(
            """\
            // DO NOT EDIT THIS FILE! It IS AUTOGENERATED
            #include "corinfoexception.h"

            struct JitInterfaceCallbacks
            {
                int (* Add)(void * thisHandle, CorInfoException** ppException, int a, int b);
            };

            class JitInterfaceWrapper
            {
                void * _thisHandle;
                JitInterfaceCallbacks * _callbacks;

            public:
                JitInterfaceWrapper(void * thisHandle, void ** callbacks)
                    : _thisHandle(thisHandle), _callbacks((JitInterfaceCallbacks *)callbacks)
                {
                }

                virtual int Add(int a, int b)
                {
                    CorInfoException* pException = nullptr;
                    int _ret = _callbacks->Add(_thisHandle, &pException, a, b);
                    if (pException != nullptr)
                        throw pException;
                    return _ret;
                }

            };
            """
        )
        self.assertEqual(render_native_wrapper(parse_text(ADD_IDL).functions), expected)

    def test_wrapper_uses_native_spellings(self) -> None:
        output = render_native_wrapper(parse_text(MIXED_IDL).functions)
        self.assertIn("    bool (* Check)(void * thisHandle, CorInfoException** ppException, RefT* value);", output)
        self.assertIn("    virtual bool Check(RefT* value)\n", output)
        self.assertIn("        bool _ret = _callbacks->Check(_thisHandle, &pException, value);", output)
        self.assertNotIn("RefStruct", output)

    def test_void_method_does_not_capture_result(self) -> None:
        output = render_native_wrapper(parse_text(MIXED_IDL).functions)
        self.assertIn("        _callbacks->Reset(_thisHandle, &pException);", output)
        self.assertNotIn("void _ret", output)

    def test_manual_wrapper_emits_declaration_only(self) -> None:
        output = render_native_wrapper(parse_text(MIXED_IDL).functions)
        self.assertIn("    virtual int Count(int bucket);\n    virtual int Last()\n", output)
        self.assertNotIn("_callbacks->Count(", output)
        self.assertIn("    int (* Count)(void * thisHandle, CorInfoException** ppException, int bucket);", output)

    def test_dispatch_fields_match_declaration_order(self) -> None:
        output = render_native_wrapper(parse_text(MIXED_IDL).functions)
        struct_body = output[output.index("struct JitInterfaceCallbacks"):output.index("};")]
        fields = [line.strip() for line in struct_body.splitlines() if "(* " in line]
        self.assertEqual(
            [field.split("(* ")[1].split(")")[0] for field in fields],
            ["Check", "Reset", "Count", "Last"],
        )

    def test_options_customize_names(self) -> None:
        options = NativeRenderOptions(
            license_header=("// Licensed under MIT.",),
            includes=("bridge_error.h", "stdint.h"),
            callbacks_struct="BridgeCallbacks",
            wrapper_class="BridgeWrapper",
            exception_type="BridgeError",
        )
        output = render_native_wrapper(parse_text(ADD_IDL).functions, options)
        self.assertTrue(output.startswith("// Licensed under MIT.\n\n// DO NOT EDIT THIS FILE! It IS AUTOGENERATED\n"))
        self.assertIn('#include "bridge_error.h"\n#include "stdint.h"\n', output)
        self.assertIn("struct BridgeCallbacks", output)
        self.assertIn("    int (* Add)(void * thisHandle, BridgeError** ppException, int a, int b);", output)
        self.assertIn("class BridgeWrapper", output)
        self.assertIn("        : _thisHandle(thisHandle), _callbacks((BridgeCallbacks *)callbacks)", output)
        self.assertIn("        BridgeError* pException = nullptr;", output)


if __name__ == "__main__":
    unittest.main()
