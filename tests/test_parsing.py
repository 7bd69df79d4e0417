from downloader_lib.parse import extract_image_urls, page_origin

HTML = """
<html><body>
  <img src="/images/plants/Sunflower.png">
  <img>
  <img src="">
  <img src="   ">
  <div><img src="https://cdn.example/Carrot.webp"></div>
  <img src="//static.example/x/Tomato.png">
  <img src="relative/Pea.png">
  <img src="/images/plants/Sunflower.png">
</body></html>
"""


def test_page_origin():
    assert page_origin('https://plantsvsbrainrotswikia.com/gear') == 'https://plantsvsbrainrotswikia.com'
    assert page_origin('http://localhost:8080/a/b?c=d') == 'http://localhost:8080'


def test_extract_image_urls_document_order_and_resolution():
    urls = extract_image_urls(HTML, 'https://wiki.example')
    assert urls == [
        'https://wiki.example/images/plants/Sunflower.png',
        'https://cdn.example/Carrot.webp',
        'https://static.example/x/Tomato.png',
        'relative/Pea.png',
        'https://wiki.example/images/plants/Sunflower.png',
    ]


def test_extract_image_urls_trailing_slash_origin():
    urls = extract_image_urls('<img src="/a.png">', 'https://wiki.example/')
    assert urls == ['https://wiki.example/a.png']


def test_extract_image_urls_no_images():
    assert extract_image_urls('<p>nothing here</p>', 'https://wiki.example') == []
