# Default mobile page served at "/". Hosts may pass their own HTML to
# ServerManager instead.
INDEX_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>Media</title>
<style>
    * { box-sizing: border-box; }
    body { margin: 0; font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, sans-serif; background: #111; color: #eee; }
    header { position: sticky; top: 0; padding: 12px 16px; background: #1b1b1b; border-bottom: 1px solid #333; display: flex; justify-content: space-between; align-items: center; }
    header h1 { font-size: 1.1rem; margin: 0; }
    header button { background: #2d6cdf; color: #fff; border: 0; border-radius: 6px; padding: 6px 12px; }
    .grid { display: grid; grid-template-columns: repeat(auto-fill, minmax(140px, 1fr)); gap: 6px; padding: 6px; }
    .item { position: relative; aspect-ratio: 1; background: #222; overflow: hidden; border-radius: 4px; }
    .item img, .item video { width: 100%; height: 100%; object-fit: cover; display: block; }
    .item .badge { position: absolute; bottom: 4px; left: 4px; font-size: 0.7rem; background: rgba(0,0,0,0.6); padding: 2px 6px; border-radius: 3px; }
    .empty { padding: 40px 16px; text-align: center; color: #888; }
    #viewer { display: none; position: fixed; inset: 0; background: #000; z-index: 10; align-items: center; justify-content: center; }
    #viewer.open { display: flex; }
    #viewer img, #viewer video { max-width: 100%; max-height: 100%; }
    #viewer .close { position: absolute; top: 10px; right: 14px; font-size: 2rem; color: #fff; background: none; border: 0; }
</style>
</head>
<body>
<header>
    <h1 id="title">Media</h1>
    <button type="button" onclick="load()">Refresh</button>
</header>
<div class="grid" id="grid"></div>
<div id="viewer"><button type="button" class="close" onclick="closeViewer()">&times;</button><div id="viewer-body"></div></div>
<script>
    function el(tag, attrs) {
        const node = document.createElement(tag);
        Object.assign(node, attrs || {});
        return node;
    }

    async function load() {
        const grid = document.getElementById('grid');
        grid.innerHTML = '';
        let files = [];
        try {
            const res = await fetch('/api/files');
            files = await res.json();
        } catch (e) {
            files = [];
        }
        document.getElementById('title').textContent = files.length + ' files';
        if (!files.length) {
            grid.appendChild(el('div', { className: 'empty', textContent: 'No media files' }));
            return;
        }
        for (const file of files) {
            const item = el('div', { className: 'item' });
            const src = encodeURI(file.path);
            if (file.mime_type === 'image') {
                item.appendChild(el('img', { src: src, loading: 'lazy', alt: file.name }));
            } else {
                item.appendChild(el('video', { src: src + '#t=0.1', preload: 'metadata', muted: true }));
                item.appendChild(el('span', { className: 'badge', textContent: 'VIDEO' }));
            }
            item.onclick = () => openViewer(file, src);
            grid.appendChild(item);
        }
    }

    function openViewer(file, src) {
        const body = document.getElementById('viewer-body');
        body.innerHTML = '';
        if (file.mime_type === 'image') {
            body.appendChild(el('img', { src: src, alt: file.name }));
        } else {
            body.appendChild(el('video', { src: src, controls: true, autoplay: true, playsInline: true }));
        }
        document.getElementById('viewer').classList.add('open');
    }

    function closeViewer() {
        document.getElementById('viewer-body').innerHTML = '';
        document.getElementById('viewer').classList.remove('open');
    }

    load();
</script>
</body>
</html>
"""
