"""Reference data: tracked institutions, officials and their aliases."""

from __future__ import annotations

from typing import Dict, List, NamedTuple, Tuple


class InstitutionSeed(NamedTuple):
    code: str
    name_jp: str
    name_en: str


class PersonSeed(NamedTuple):
    institution_code: str
    slug: str
    name_jp: str
    name_en: str
    role: str
    active: bool = True


INSTITUTIONS: Tuple[InstitutionSeed, ...] = (
    InstitutionSeed("FRB", "米連邦準備制度理事会", "Federal Reserve Board"),
    InstitutionSeed("ECB", "欧州中央銀行", "European Central Bank"),
    InstitutionSeed("BOJ", "日本銀行", "Bank of Japan"),
    InstitutionSeed("BoE", "イングランド銀行", "Bank of England"),
    InstitutionSeed("SNB", "スイス国立銀行", "Swiss National Bank"),
)

PERSONS: Tuple[PersonSeed, ...] = (
    PersonSeed("FRB", "jerome-h-powell", "ジェローム・パウエル", "Jerome H. Powell", "議長"),
    PersonSeed("FRB", "philip-n-jefferson", "フィリップ・ジェファーソン", "Philip N. Jefferson", "副議長"),
    PersonSeed("FRB", "michael-s-barr", "マイケル・バー", "Michael S. Barr", "副議長（銀行監督担当）"),
    PersonSeed("FRB", "michelle-w-bowman", "ミシェル・ボウマン", "Michelle W. Bowman", "理事"),
    PersonSeed("FRB", "christopher-j-waller", "クリストファー・ウォーラー", "Christopher J. Waller", "理事"),
    PersonSeed("FRB", "lisa-d-cook", "リサ・クック", "Lisa D. Cook", "理事"),
    PersonSeed("FRB", "adriana-d-kugler", "アドリアナ・クーグラー", "Adriana D. Kugler", "理事"),
    PersonSeed("ECB", "christine-lagarde", "クリスティーヌ・ラガルド", "Christine Lagarde", "総裁"),
    PersonSeed("ECB", "luis-de-guindos", "ルイス・デ・ギンドス", "Luis de Guindos", "副総裁"),
    PersonSeed("ECB", "philip-r-lane", "フィリップ・レーン", "Philip R. Lane", "理事"),
    PersonSeed("ECB", "isabel-schnabel", "イザベル・シュナーベル", "Isabel Schnabel", "理事"),
    PersonSeed("ECB", "piero-cipollone", "ピエロ・チポローネ", "Piero Cipollone", "理事"),
    PersonSeed("ECB", "frank-elderson", "フランク・エルダーソン", "Frank Elderson", "理事"),
    PersonSeed("BOJ", "kazuo-ueda", "植田 和男", "Kazuo Ueda", "総裁"),
    PersonSeed("BOJ", "ryozo-himino", "氷見野 良三", "Ryozo Himino", "副総裁"),
    PersonSeed("BOJ", "shinichi-uchida", "内田 真一", "Shinichi Uchida", "副総裁"),
    PersonSeed("BOJ", "asahi-noguchi", "野口 旭", "Asahi Noguchi", "審議委員"),
    PersonSeed("BOJ", "junko-nakagawa", "中川 順子", "Junko Nakagawa", "審議委員"),
    PersonSeed("BOJ", "hajime-takata", "高田 創", "Hajime Takata", "審議委員"),
    PersonSeed("BOJ", "naoki-tamura", "田村 直樹", "Naoki Tamura", "審議委員"),
    PersonSeed("BOJ", "junko-koeda", "小枝 淳子", "Junko Koeda", "審議委員"),
    PersonSeed("BOJ", "kazuyuki-masu", "増 和幸", "Kazuyuki Masu", "審議委員"),
    PersonSeed("BoE", "andrew-bailey", "アンドリュー・ベイリー", "Andrew Bailey", "総裁"),
    PersonSeed("BoE", "sarah-breeden", "サラ・ブリーデン", "Sarah Breeden", "副総裁"),
    PersonSeed("BoE", "ben-broadbent", "ベン・ブロードベント", "Ben Broadbent", "副総裁"),
    PersonSeed("BoE", "dave-ramsden", "デイブ・ラムスデン", "Dave Ramsden", "副総裁"),
    PersonSeed("BoE", "huw-pill", "ヒュー・ピル", "Huw Pill", "チーフエコノミスト"),
    PersonSeed("BoE", "jonathan-haskel", "ジョナサン・ハスケル", "Jonathan Haskel", "MPC外部委員"),
    PersonSeed("BoE", "catherine-l-mann", "キャサリン・マン", "Catherine L. Mann", "MPC外部委員"),
    PersonSeed("BoE", "megan-greene", "メーガン・グリーン", "Megan Greene", "MPC外部委員"),
    PersonSeed("BoE", "clare-lombardelli", "クレア・ロンバルデッリ", "Clare Lombardelli", "MPC外部委員"),
    PersonSeed("SNB", "martin-schlegel", "マーティン・シュレーゲル", "Martin Schlegel", "総裁"),
    PersonSeed("SNB", "antoine-martin", "アントワーヌ・マルタン", "Antoine Martin", "副総裁"),
    PersonSeed("SNB", "petra-tschudin", "ペトラ・チュディン", "Petra Tschudin", "理事"),
)

ALIASES: Dict[str, List[str]] = {
    "jerome-h-powell": ["Jerome H. Powell", "Jerome H Powell", "Jerome Powell", "ジェローム・パウエル", "ジェローム パウエル", "パウエル議長", "FRB議長"],
    "philip-n-jefferson": ["Philip N. Jefferson", "Philip N Jefferson", "Philip Jefferson", "フィリップ・ジェファーソン", "フィリップ ジェファーソン", "ジェファーソン副議長"],
    "michael-s-barr": ["Michael S. Barr", "Michael S Barr", "Michael Barr", "マイケル・バー", "マイケル バー", "バー副議長"],
    "michelle-w-bowman": ["Michelle W. Bowman", "Michelle W Bowman", "Michelle Bowman", "ミシェル・ボウマン", "ミシェル ボウマン", "ボウマン理事"],
    "christopher-j-waller": ["Christopher J. Waller", "Christopher J Waller", "Christopher Waller", "クリストファー・ウォーラー", "クリストファー ウォーラー", "FRB理事"],
    "lisa-d-cook": ["Lisa D. Cook", "Lisa D Cook", "Lisa Cook", "リサ・クック", "リサ クック", "FRB理事"],
    "adriana-d-kugler": ["Adriana D. Kugler", "Adriana D Kugler", "Adriana Kugler", "アドリアナ・クーグラー", "アドリアナ クーグラー", "FRB理事"],
    "christine-lagarde": ["Christine Lagarde", "クリスティーヌ・ラガルド", "クリスティーヌ ラガルド", "ラガルド総裁", "ECB総裁"],
    "luis-de-guindos": ["Luis de Guindos", "ルイス・デ・ギンドス", "ルイス デ ギンドス", "デ・ギンドス副総裁", "ECB副総裁"],
    "philip-r-lane": ["Philip R. Lane", "Philip R Lane", "Philip Lane", "フィリップ・レーン", "フィリップ レーン", "レーン理事", "ECB理事"],
    "isabel-schnabel": ["Isabel Schnabel", "イザベル・シュナーベル", "イザベル シュナーベル", "シュナーベル理事", "ECB理事"],
    "piero-cipollone": ["Piero Cipollone", "ピエロ・チポローネ", "ピエロ チポローネ", "チポローネ理事", "ECB理事"],
    "frank-elderson": ["Frank Elderson", "フランク・エルダーソン", "フランク エルダーソン", "エルダーソン理事", "ECB理事"],
    "kazuo-ueda": ["Kazuo Ueda", "植田和男", "植田 和男", "植田総裁", "日銀総裁", "日本銀行総裁"],
    "ryozo-himino": ["Ryozo Himino", "氷見野良三", "氷見野 良三", "氷見野副総裁", "日銀副総裁", "BOJ副総裁"],
    "shinichi-uchida": ["Shinichi Uchida", "内田真一", "内田 真一", "内田副総裁", "日銀副総裁", "BOJ副総裁"],
    "asahi-noguchi": ["Asahi Noguchi", "野口旭", "野口 旭", "野口審議委員", "日銀審議委員", "BOJ審議委員"],
    "junko-nakagawa": ["Junko Nakagawa", "中川順子", "中川 順子", "中川審議委員", "日銀審議委員", "BOJ審議委員"],
    "hajime-takata": ["Hajime Takata", "高田創", "高田 創", "高田審議委員", "日銀審議委員", "BOJ審議委員"],
    "naoki-tamura": ["Naoki Tamura", "田村直樹", "田村 直樹", "田村審議委員", "日銀審議委員", "BOJ審議委員"],
    "junko-koeda": ["Junko Koeda", "小枝淳子", "小枝 淳子", "小枝審議委員", "日銀審議委員", "BOJ審議委員"],
    "kazuyuki-masu": ["Kazuyuki Masu", "増和幸", "増 和幸", "増審議委員", "日銀審議委員", "BOJ審議委員"],
    "andrew-bailey": ["Andrew Bailey", "アンドリュー・ベイリー", "アンドリュー ベイリー", "ベイリー総裁", "BoE総裁", "英中銀総裁"],
    "sarah-breeden": ["Sarah Breeden", "サラ・ブリーデン", "サラ ブリーデン", "ブリーデン副総裁", "BoE副総裁", "金融安定担当副総裁"],
    "ben-broadbent": ["Ben Broadbent", "ベン・ブロードベント", "ベン ブロードベント", "ブロードベント副総裁", "BoE副総裁", "金融政策担当副総裁"],
    "dave-ramsden": ["Dave Ramsden", "デイブ・ラムスデン", "デイブ ラムスデン", "ラムスデン副総裁", "BoE副総裁", "市場・銀行担当副総裁"],
    "huw-pill": ["Huw Pill", "ヒュー・ピル", "ヒュー ピル", "ピル チーフエコノミスト", "BoEチーフエコノミスト"],
    "jonathan-haskel": ["Jonathan Haskel", "ジョナサン・ハスケル", "ジョナサン ハスケル", "ハスケル外部委員", "MPC外部委員"],
    "catherine-l-mann": ["Catherine L. Mann", "Catherine L Mann", "Catherine Mann", "キャサリン・マン", "キャサリン マン", "マン外部委員", "MPC外部委員"],
    "megan-greene": ["Megan Greene", "メーガン・グリーン", "メーガン グリーン", "グリーン外部委員", "MPC外部委員"],
    "clare-lombardelli": ["Clare Lombardelli", "クレア・ロンバルデッリ", "クレア ロンバルデッリ", "ロンバルデッリ外部委員", "MPC外部委員"],
    "martin-schlegel": ["Martin Schlegel", "マーティン・シュレーゲル", "マーティン シュレーゲル", "シュレーゲル総裁", "SNB総裁"],
    "antoine-martin": ["Antoine Martin", "アントワーヌ・マルタン", "アントワーヌ マルタン", "マルタン副総裁", "SNB副総裁"],
    "petra-tschudin": ["Petra Tschudin", "ペトラ・チュディン", "ペトラ チュディン", "チュディン理事", "SNB理事"],
}
