from safesend.utils.paths import contains, decode, hasTraversal, isAbsolute, leadingDot


def test_decode():
	assert decode("/a%20b") == "/a b"
	assert decode("/caf%C3%A9") == "/café"
	assert decode("/a+b") == "/a+b"
	assert decode("/%00") == "/\0"
	assert decode("/already/plain") == "/already/plain"


def test_decode_malformed():
	assert decode("/%") is None
	assert decode("/%zz") is None
	assert decode("/%E0%A4%A") is None
	# Not valid UTF-8 once decoded
	assert decode("/%C3%28") is None
	assert decode("/%FF") is None


def test_is_absolute():
	assert isAbsolute("/etc/passwd")
	assert isAbsolute("C:\\Windows")
	assert isAbsolute("\\\\server\\share")
	assert not isAbsolute("relative/path")
	assert not isAbsolute("")
	assert not isAbsolute("C:")


def test_traversal_segments():
	assert hasTraversal("/a/../b")
	assert hasTraversal("..")
	assert hasTraversal("a\\..\\b")
	assert not hasTraversal("/a/..b/c")
	assert not hasTraversal("/file..txt")


def test_contains_is_segment_aware():
	assert contains("/srv/www", "/srv/www")
	assert contains("/srv/www", "/srv/www/index.html")
	assert not contains("/srv/www", "/srv/www-secret/index.html")
	assert not contains("/srv/www", "/srv/wwwx")
	assert not contains("/srv/www", "/srv")
	assert contains("/", "/etc/passwd")


def test_leading_dot():
	assert leadingDot("/srv/www/.env")
	assert not leadingDot("/srv/.git/config")
	assert not leadingDot("/srv/www/a.b")


# EOF
