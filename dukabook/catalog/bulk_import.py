"""
CSV bulk import of products.

Parsing collects every problem instead of stopping at the first one, so a
caller can show the whole list and the user can fix the file in one pass.
Writing happens only for a clean file and runs in a single transaction.
"""
import csv
import logging
from decimal import Decimal, InvalidOperation

from django.conf import settings
from django.db import transaction

from .models import Category, Product
from .utils import generate_import_sku

logger = logging.getLogger('dukabook.catalog')

TEMPLATE_HEADERS = [
    'name',
    'category',
    'costprice',
    'sellingprice',
    'quantity',
    'sku',
    'barcode',
    'unit',
    'low_stock_threshold',
    'image_url',
    'description',
]

TEMPLATE_EXAMPLE_ROW = [
    'Coca-Cola 500ml',
    'Soft Drinks',
    '40',
    '60',
    '24',
    'SKU-COCA-500',
    '0123456789012',
    'pcs',
    '5',
    'https://example.com/image.jpg',
    'Sample description',
]

REQUIRED_HEADERS = ['name', 'category', 'costprice', 'sellingprice', 'quantity']

TEMPLATE_FILENAME = 'products_template.csv'

# Product.buying_price/selling_price are max_digits=12, decimal_places=2
MAX_PRICE = Decimal('1e10')
MAX_COUNT = Decimal(2 ** 31)


class ImportValidationError(ValueError):
    """Raised when a parsed file cannot be imported"""
    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__('; '.join(self.errors))


def build_template_csv():
    """Header line plus one fully quoted example row"""
    example = ','.join('"%s"' % value.replace('"', '""') for value in TEMPLATE_EXAMPLE_ROW)
    return f"{','.join(TEMPLATE_HEADERS)}\n{example}\n"


def split_csv_line(line):
    """
    Split one CSV line on commas outside double quotes.

    A doubled quote inside a quoted value is a literal quote. Values are
    trimmed.
    """
    values = next(csv.reader([line]), [])
    return [v.strip() for v in values]


def parse_number(value):
    """Parse a CSV cell as a finite Decimal, None when it is not a number"""
    value = (value or '').strip()
    if value == '':
        return None
    try:
        number = Decimal(value)
    except InvalidOperation:
        return None
    if not number.is_finite():
        return None
    return number


def _check_number(value, field, limit, whole=False):
    number = parse_number(value)
    if number is None:
        return f"{field} must be a number"
    if number < 0:
        return f"{field} cannot be negative"
    if number >= limit:
        return f"{field} is too large"
    if whole and number != number.to_integral_value():
        return f"{field} must be a whole number"
    return None


def parse_csv(text):
    """
    Parse CSV text into {'headers': [...], 'rows': [...], 'errors': [...]}.

    Rows are dicts keyed by lower-cased header. Missing trailing values read
    as empty strings. Row errors carry the file line number (header is line 1).
    """
    lines = (text or '').replace('\r\n', '\n').replace('\r', '\n').split('\n')
    lines = [line for line in lines if line.strip()]

    if not lines:
        return {'headers': [], 'rows': [], 'errors': ['File is empty']}

    headers = [h.strip().lower() for h in split_csv_line(lines[0])]
    errors = []

    for required in REQUIRED_HEADERS:
        if required not in headers:
            errors.append(f"Missing required header: {required}")

    rows = []
    for line in lines[1:]:
        values = split_csv_line(line)
        row = {}
        for idx, header in enumerate(headers):
            row[header] = values[idx] if idx < len(values) else ''
        rows.append(row)

    for idx, row in enumerate(rows):
        line_no = idx + 2
        if not row.get('name', '').strip():
            errors.append(f"Line {line_no}: name is required")
        if not row.get('category', '').strip():
            errors.append(f"Line {line_no}: category is required")
        for field in ('costprice', 'sellingprice'):
            error = _check_number(row.get(field), field, MAX_PRICE)
            if error:
                errors.append(f"Line {line_no}: {error}")
        error = _check_number(row.get('quantity'), 'quantity', MAX_COUNT, whole=True)
        if error:
            errors.append(f"Line {line_no}: {error}")
        threshold = row.get('low_stock_threshold', '').strip()
        if threshold:
            error = _check_number(threshold, 'low_stock_threshold', MAX_COUNT, whole=True)
            if error:
                errors.append(f"Line {line_no}: {error}")

    return {'headers': headers, 'rows': rows, 'errors': errors}


def _optional(row, key):
    return row.get(key, '').strip() or None


def build_product_data(row):
    """Turn a validated row into Product field values"""
    threshold = row.get('low_stock_threshold', '').strip()
    return {
        'name': row.get('name', '').strip(),
        'category_name': row.get('category', '').strip(),
        'sku': row.get('sku', '').strip() or generate_import_sku(),
        'barcode': _optional(row, 'barcode'),
        'description': _optional(row, 'description'),
        'buying_price': parse_number(row.get('costprice')).quantize(Decimal('0.01')),
        'selling_price': parse_number(row.get('sellingprice')).quantize(Decimal('0.01')),
        'quantity': int(parse_number(row.get('quantity'))),
        'unit': row.get('unit', '').strip() or 'pcs',
        'low_stock_threshold': int(parse_number(threshold)) if threshold else settings.DEFAULT_LOW_STOCK_THRESHOLD,
        'image_url': _optional(row, 'image_url'),
    }


def preview_rows(parsed):
    """Product payloads for a dry run, without touching the database"""
    if parsed['errors']:
        return []
    return [build_product_data(row) for row in parsed['rows']]


def _check_skus(payload):
    errors = []
    seen = {}
    for idx, data in enumerate(payload):
        line_no = idx + 2
        sku = data['sku']
        if sku in seen:
            errors.append(f"Line {line_no}: sku {sku} duplicates line {seen[sku]}")
        else:
            seen[sku] = line_no
    existing = set(Product.objects.filter(sku__in=list(seen)).values_list('sku', flat=True))
    for sku in sorted(existing):
        errors.append(f"Line {seen[sku]}: sku {sku} already exists")
    return errors


def _resolve_category(name, user, categories):
    key = name.lower()
    if key not in categories:
        category = Category.objects.filter(name__iexact=name).first()
        if category is None:
            category = Category.objects.create(name=name, created_by=user)
        categories[key] = category
    return categories[key]


def import_products(parsed, user=None, chunk_size=None):
    """
    Insert every parsed row as a product.

    Raises ImportValidationError when the file has errors, has no rows, or
    names SKUs that are already taken. Inserts are chunked and share one
    transaction, so a failing chunk leaves nothing behind.
    """
    if parsed['errors']:
        raise ImportValidationError(parsed['errors'])
    if not parsed['rows']:
        raise ImportValidationError(['No rows found to import'])

    chunk_size = chunk_size or settings.BULK_IMPORT_CHUNK_SIZE
    payload = [build_product_data(row) for row in parsed['rows']]

    sku_errors = _check_skus(payload)
    if sku_errors:
        raise ImportValidationError(sku_errors)

    created = []
    with transaction.atomic():
        categories = {}
        products = []
        for data in payload:
            data = dict(data)
            category = _resolve_category(data.pop('category_name'), user, categories)
            products.append(Product(category=category, created_by=user, **data))

        for start in range(0, len(products), chunk_size):
            chunk = products[start:start + chunk_size]
            created.extend(Product.objects.bulk_create(chunk))
            logger.debug(f"Inserted product chunk {start // chunk_size + 1} ({len(chunk)} rows)")

    # bulk_create bypasses post_save
    from dukabook.core.cache_signals import invalidate_reports_cache_manual
    invalidate_reports_cache_manual()

    logger.info(f"Imported {len(created)} products")
    return created
