# Copyright (c) 2009, Karoly Lorentey  <karoly@lorentey.hu>

import unittest

from builders import frame, text_frame, comment_frame

from mp3tagdata.frames import *
from mp3tagdata.id3 import *
import mp3tagdata.id3 as id3

class FrameLayoutTestCase(unittest.TestCase):
    def testHeaderFields(self):
        data = b"\x00\x00" + frame("TIT2", b"\x00Hello World", status=0x10)
        layout = FrameLayout(data, 2, 4)
        self.assertEqual(layout.frameid, "TIT2")
        self.assertEqual(layout.size, 12)
        self.assertEqual(layout.frame_bytes, 22)
        self.assertEqual(layout.end, 24)
        self.assertTrue(layout.is_complete)
        self.assertTrue(layout.is_read_only)
        self.assertEqual(layout.flags, {"read_only"})
        self.assertEqual(layout.payload, b"\x00Hello World")
        self.assertEqual(layout.raw, data[2:])

    def testVersionedSize(self):
        # 200 is not a valid syncsafe byte; ID3v2.3 stores sizes as plain integers
        data = frame("TALB", b"\x00" + b"a" * 199, version=3)
        self.assertEqual(data[4:8], b"\x00\x00\x00\xC8")
        self.assertEqual(FrameLayout(data, 0, 3).size, 200)
        data = frame("TALB", b"\x00" + b"a" * 199, version=4)
        self.assertEqual(data[4:8], b"\x00\x00\x01\x48")
        self.assertEqual(FrameLayout(data, 0, 4).size, 200)

    def testReadOnlyFlagDependsOnVersion(self):
        data = frame("TIT2", b"\x00x", status=0x20)
        self.assertTrue(FrameLayout(data, 0, 3).is_read_only)
        self.assertFalse(FrameLayout(data, 0, 4).is_read_only)

    def testTextBytes(self):
        layout = FrameLayout(frame("TIT2", b"\x00abc"), 0, 4)
        self.assertEqual(layout.text_bytes(11), 3)
        self.assertEqual(layout.text_bytes(14), 0)
        # Offsets past the declared extent yield no text rather than a negative size
        self.assertEqual(layout.text_bytes(20), 0)
        self.assertEqual(layout.span(20), b"")
        self.assertEqual(layout.span(11), b"abc")

    def testSpanStaysInsideFrame(self):
        data = frame("TIT2", b"\x00abc") + frame("TALB", b"\x00def")
        layout = FrameLayout(data, 0, 4)
        self.assertEqual(layout.span(10), b"\x00abc")

    def testIncompleteFrames(self):
        data = frame("TIT2", b"\x00abcdef")
        self.assertFalse(FrameLayout(data[:-1], 0, 4).is_complete)
        self.assertFalse(FrameLayout(data[:6], 0, 4).is_complete)
        self.assertEqual(FrameLayout(data[:6], 0, 4).size, 0)

    def testIsValidFrame(self):
        self.assertTrue(is_valid_frame(frame("TIT2", b"")))
        self.assertTrue(is_valid_frame(frame("WXX1", b"")))
        self.assertFalse(is_valid_frame(b"\x00\x00\x00\x00"))
        self.assertFalse(is_valid_frame(b"tit2"))
        self.assertFalse(is_valid_frame(b"TI:2"))
        self.assertFalse(is_valid_frame(b"TIT "))
        self.assertFalse(is_valid_frame(b"TIT"))
        self.assertFalse(is_valid_frame(b"TIT2", 4))
        self.assertTrue(is_valid_frame(b"\x00\x00COMM", 2))

    def testEncodeFrame(self):
        self.assertEqual(encode_frame("TIT2", b"\x00abc", 4), frame("TIT2", b"\x00abc"))
        self.assertEqual(encode_frame("TIT2", b"\x00" + b"a" * 199, 3),
                         frame("TIT2", b"\x00" + b"a" * 199, version=3))
        self.assertRaises(ValueError, encode_frame, "tit2", b"", 4)


class FrameTestCase(unittest.TestCase):
    def testDecodeText(self):
        layout = FrameLayout(text_frame("TIT2", "Hello World"), 0, 4)
        f = TIT2._from_layout(layout)
        self.assertEqual(f.frameid, "TIT2")
        self.assertEqual(f.encoding, 0)
        self.assertEqual(f.text, "Hello World")
        self.assertEqual(f.offsets, {"encoding": 10, "text": 11})

    def testDecodeUtf16Text(self):
        layout = FrameLayout(text_frame("TPE1", "Björk\x00", encoding=1), 0, 4)
        self.assertEqual(TPE1._from_layout(layout).text, "Björk")

    def testDecodeComment(self):
        layout = FrameLayout(comment_frame("Nice", desc="Note"), 0, 4)
        f = COMM._from_layout(layout)
        self.assertEqual((f.lang, f.desc, f.text), ("eng", "Note", "Nice"))
        self.assertEqual(f.offsets["text"], 10 + 1 + 3 + 5)

    def testDecodeWideComment(self):
        payload = (b"\x01eng" + "d".encode("utf-16") + b"\x00\x00"
                   + "Long comment".encode("utf-16"))
        f = COMM._from_layout(FrameLayout(frame("COMM", payload), 0, 4))
        self.assertEqual((f.desc, f.text), ("d", "Long comment"))

    def testDecodePrivate(self):
        layout = FrameLayout(frame("PRIV", b"owner@example\x00\x01\x02\x03"), 0, 4)
        f = PRIV._from_layout(layout)
        self.assertEqual(f.owner, "owner@example")
        self.assertEqual(f.data, b"\x01\x02\x03")
        self.assertEqual(f.offsets["data"], 24)

    def testEmptyPayloadFails(self):
        layout = FrameLayout(frame("TIT2", b""), 0, 4)
        self.assertRaises(EOFError, TIT2._from_layout, layout)

    def testEncodePrefersLatin1(self):
        self.assertEqual(TIT2("Hello")._to_data(), b"\x00Hello")
        self.assertEqual(TIT2("Ő")._to_data(), b"\x03" + "Ő".encode("utf-8"))

    def testEncodeComment(self):
        self.assertEqual(COMM("hello")._encode(4), frame("COMM", b"\x00eng\x00hello"))

    def testEquality(self):
        self.assertEqual(TIT2("a"), TIT2("a"))
        self.assertNotEqual(TIT2("a"), TIT2("b"))
        self.assertNotEqual(TIT2("a"), TALB("a"))

    def testStr(self):
        self.assertEqual(str(TIT2("a", flags={"read_only"})), "rTIT2(<undef> 'a')")


class Id3TestCase(unittest.TestCase):
    def testFrameId(self):
        self.assertEqual(frame_id(TIT2), "TIT2")
        self.assertEqual(frame_id("TIT2"), "TIT2")
        self.assertEqual(frame_id("title"), "TIT2")
        self.assertEqual(frame_id("Title"), "TIT2")
        self.assertEqual(frame_id("key"), "TKEY")
        self.assertEqual(frame_id("TENC"), "TENC")
        self.assertRaises(KeyError, frame_id, "nonsense")
        self.assertRaises(KeyError, frame_id, "TIT2 ")
        self.assertRaises(KeyError, frame_id, 42)

    def testMappingsAreReadOnly(self):
        self.assertEqual(id3.known_frames["TIT2"], TIT2)
        self.assertEqual(id3.frame_types["comment"], COMM)
        with self.assertRaises(TypeError):
            id3.frame_types["title"] = TALB
        with self.assertRaises(TypeError):
            id3.known_frames["XXXX"] = TIT2

    def testFrameTypesAreTextFrames(self):
        for name, cls in id3.frame_types.items():
            if name == "comment":
                self.assertFalse(is_text_frame_id(cls.frameid))
            else:
                self.assertTrue(is_text_frame_id(cls.frameid), name)

    def testFrameClass(self):
        self.assertIs(frame_class("TIT2"), TIT2)
        self.assertIs(frame_class("TENC"), TextFrame)
        self.assertIs(frame_class("APIC"), UnknownFrame)
        self.assertIs(frame_class("TXXX"), TXXX)
        self.assertFalse(is_text_frame_id("TXXX"))

suite = unittest.TestSuite([
        unittest.TestLoader().loadTestsFromTestCase(FrameLayoutTestCase),
        unittest.TestLoader().loadTestsFromTestCase(FrameTestCase),
        unittest.TestLoader().loadTestsFromTestCase(Id3TestCase),
        ])

if __name__ == "__main__":
    unittest.main(defaultTest="suite")
