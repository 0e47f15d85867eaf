"""
Tests for object key resolution.
"""

import unittest

from s3_images.common.naming import Generated, Named, as_object_name, generate_key, resolve_object_key
from s3_images.configuration import DEFAULT_EXTENSION
from s3_images.errors import InvalidNameError, S3ImagesError


class TestObjectNames(unittest.TestCase):
    """Test Named / Generated key policy."""

    def test_named_is_verbatim(self):
        """Named keys are never rewritten, extension included."""
        for name in ("greeting.txt", "brand/logo.PNG", "no-extension", "a b.jpeg"):
            self.assertEqual(resolve_object_key(Named(name), "png"), name)

    def test_named_rejects_empty(self):
        with self.assertRaises(InvalidNameError) as ctx:
            Named("")
        self.assertIsInstance(ctx.exception, S3ImagesError)
        self.assertIsInstance(ctx.exception, ValueError)

    def test_generated_uses_inferred_extension(self):
        key = resolve_object_key(Generated(), "png")
        self.assertTrue(key.endswith(".png"))
        self.assertGreater(len(key), len(".png"))

    def test_generated_forced_extension_wins(self):
        key = resolve_object_key(Generated(extension=".webp"), "png")
        self.assertTrue(key.endswith(".webp"))
        self.assertNotIn("..", key)

    def test_generated_default_extension(self):
        self.assertTrue(resolve_object_key(Generated()).endswith(f".{DEFAULT_EXTENSION}"))

    def test_generated_keys_differ(self):
        keys = {generate_key("png") for _ in range(100)}
        self.assertEqual(len(keys), 100)

    def test_as_object_name(self):
        self.assertEqual(as_object_name(None), Generated())
        self.assertEqual(as_object_name("x.png"), Named("x.png"))
        named = Named("y.png")
        self.assertIs(as_object_name(named), named)
        with self.assertRaises(TypeError):
            as_object_name(42)


if __name__ == '__main__':
    unittest.main()
